# app/cli/review_aspect_misses.py
"""
Re-runs the current keyword rules against pending aspect misses and marks
the ones they now cover as resolved. Run after adding rules to
ebay_aspect_keywords.
"""
import asyncio
import logging
import click

from app.core.exceptions import DatabaseError
from app.core.logging_config import configure_logging
from app.database import async_session
from app.services.ebay.aspect_review import DEFAULT_REVIEW_LIMIT, AspectMissReviewer
from app.services.ebay.store import ListingStore

logger = logging.getLogger(__name__)

@click.command()
@click.option('--limit', default=DEFAULT_REVIEW_LIMIT, show_default=True, type=int, help='Misses to review per run (0 for all)')
def review_aspect_misses(limit):
    """Resolve pending aspect misses that the keyword rules now match"""
    configure_logging()

    try:
        summary = asyncio.run(run_review(limit or None))
    except DatabaseError as e:
        click.echo(f"Error: {str(e)}", err=True)
        raise SystemExit(1)

    for line in summary.resolved_misses:
        click.echo(f"  resolved {line}")
    click.echo(
        f"Reviewed {summary.reviewed}: {summary.resolved} resolved, "
        f"{summary.still_pending} still pending, {summary.failed} failed"
    )

async def run_review(limit, session_factory=async_session):
    async with session_factory() as session:
        reviewer = AspectMissReviewer(ListingStore(session))
        return await reviewer.review(limit)

if __name__ == "__main__":
    review_aspect_misses()
