# app/cli/publish_asin.py
import asyncio
import logging
import click
from decimal import Decimal

from app.core.exceptions import BaseServiceError, ListingPublicationError
from app.core.logging_config import configure_logging
from app.database import async_session
from app.services.ebay.publisher import ListingPublisher

logger = logging.getLogger(__name__)

@click.command()
@click.argument('asin')
@click.argument('price', type=Decimal)
@click.option('--quantity', default=1, show_default=True, type=int, help='Available quantity')
@click.option('--condition', default='NEW', show_default=True, help='Condition (NEW, LIKE_NEW, VERY_GOOD, GOOD, ACCEPTABLE, ...)')
@click.option('--no-publish', is_flag=True, help='Create the offer but leave it unpublished')
def publish_asin(asin, price, quantity, condition, no_publish):
    """Create an eBay listing for ASIN at PRICE"""
    configure_logging()

    try:
        result = asyncio.run(run_publish(asin, price, quantity, condition, not no_publish))
    except ListingPublicationError as e:
        click.echo(f"Failed at stage '{e.stage}': {e.message}", err=True)
        for failure in e.rollback_failures:
            click.echo(f"  rollback failed: {failure}", err=True)
        raise SystemExit(1)
    except BaseServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        raise SystemExit(1)

    click.echo(f"\nSKU: {result.sku}")
    click.echo(f"Category: {result.category_name} ({result.category_id}) [{result.match_type}]")
    click.echo(f"Offer: {result.offer_id}")
    if result.published:
        click.echo(f"Listing: {result.listing_url}")
    else:
        click.echo("Offer created (not published)")
    if result.unresolved_aspects:
        click.echo(f"Unresolved aspects: {', '.join(result.unresolved_aspects)}")

async def run_publish(asin, price, quantity, condition, publish):
    async with async_session() as session:
        publisher = ListingPublisher.from_settings(session)
        return await publisher.publish(asin, price, quantity=quantity, condition=condition, publish=publish)

if __name__ == "__main__":
    publish_asin()
