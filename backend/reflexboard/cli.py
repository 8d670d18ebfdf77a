from datetime import datetime, timedelta, timezone

import click
from flask import current_app

from reflexboard import db
from reflexboard.client import LeaderboardClient, LeaderboardClientError, format_leaderboard

SAMPLE_SCORES = [
    ('Ann', 181),
    ('Bo', 214),
    ('Cyd', 247),
    ('Dee', 305),
    ('Eli', 392),
    ('Anonymous', 466),
]


def register_cli(flask_app):

    @flask_app.cli.command('db-reset')
    @click.option('--seed/--no-seed', default=True, help='Insert a handful of sample scores.')
    def db_reset_command(seed):
        """Drops, recreates, and optionally seeds the database."""
        from reflexboard.models import Score
        db.drop_all()
        db.create_all()

        if seed:
            start = datetime.now(timezone.utc) - timedelta(days=len(SAMPLE_SCORES))
            for offset, (name, reaction_time) in enumerate(SAMPLE_SCORES):
                db.session.add(Score(name=name, reaction_time=reaction_time, timestamp=start + timedelta(days=offset)))
            db.session.commit()
        click.echo('Database has been reset' + (' and seeded!' if seed else '!'))

    @flask_app.cli.group('leaderboard')
    def leaderboard_group():
        """Talk to a running leaderboard server."""

    @leaderboard_group.command('show')
    @click.option('--url', default=None, help='Server base URL (defaults to LEADERBOARD_URL).')
    @click.option('--highlight', default=None, help='Score id to mark as yours.')
    def show_command(url, highlight):
        client = LeaderboardClient(url or current_app.config['LEADERBOARD_URL'])
        view = client.fetch_top_scores()
        click.echo(format_leaderboard(view, highlight_id=highlight))
        if not view.ok:
            raise click.exceptions.Exit(1)

    @leaderboard_group.command('submit')
    @click.argument('reaction_time', type=float)
    @click.option('--name', default=None, help='Name to show (max 20 characters).')
    @click.option('--url', default=None, help='Server base URL (defaults to LEADERBOARD_URL).')
    def submit_command(reaction_time, name, url):
        client = LeaderboardClient(url or current_app.config['LEADERBOARD_URL'])
        try:
            result = client.submit_score(reaction_time, name=name)
        except LeaderboardClientError as exc:
            raise click.ClickException(str(exc))
        entry = result['entry']
        click.echo(f"Submitted {entry['name']} {entry['reactionTime']}ms: id={result['id']} rank={result['rank']}")
