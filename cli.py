import click
import logging
import sys
import sqlalchemy.exc
from pathlib import Path
from tabulate import tabulate
import traceback

from config.settings import get_settings
from config.logging_config import configure_logging
from core.scrapers.websites.woocommerce_scraper import WooCommerceScraper
from core.output.writers import write_products_csv, write_summary, read_summary
from core.database.operations import (
    init_db,
    SessionLocal,
    create_run,
    add_products,
    finish_run,
    get_run,
    get_runs,
    get_latest_run,
    get_products,
    count_products,
)

logger = logging.getLogger("shop-scraper-cli")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, verbose):
    """WooCommerce shop scraping tool."""
    settings = get_settings()
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose

    configure_logging(logging.DEBUG if verbose else settings.LOG_LEVEL)
    if verbose:
        logger.debug("Debug logging enabled")


@cli.command()
def init():
    """Initialize the database."""
    init_db()
    click.echo("Database initialized!")


@cli.command()
@click.option("--base-url", "-u", default=None, help="First listing page to scrape")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for products.csv, summary.json and logs",
)
@click.option("--max-retries", type=click.IntRange(min=1), default=None, help="Attempts per request")
@click.option("--save/--no-save", default=False, help="Also store the run in the database (default: False)")
@click.option("--description", "-d", default="CLI scrape", help="Label for the stored run")
@click.pass_context
def scrape(ctx, base_url, output_dir, max_retries, save, description):
    """Scrape every listing page of the shop."""
    settings = get_settings()
    base_url = base_url or settings.BASE_URL
    output_dir = output_dir or settings.OUTPUT_DIR
    log_dir = output_dir / "logs" if output_dir != settings.OUTPUT_DIR else settings.LOG_DIR
    csv_path = output_dir / settings.CSV_FILENAME
    summary_path = output_dir / settings.SUMMARY_FILENAME

    output_dir.mkdir(parents=True, exist_ok=True)
    configure_logging(logging.DEBUG if ctx.obj["VERBOSE"] else settings.LOG_LEVEL,
                      error_log_path=log_dir / settings.ERROR_LOG_FILENAME)

    def save_progress(products):
        count = write_products_csv(products, csv_path)
        logger.info("Saved %d products to %s", count, csv_path)

    try:
        scraper = WooCommerceScraper(
            url=base_url,
            category=settings.CATEGORY,
            max_retries=max_retries or settings.MAX_RETRIES,
            timeout=settings.REQUEST_TIMEOUT,
            item_delay=settings.ITEM_DELAY,
            page_delay=settings.PAGE_DELAY,
            on_page=save_progress,
        )

        click.echo(f"Scraping {base_url}...")
        products = scraper.scrape()
        summary = scraper.summary()
        write_summary(summary, summary_path)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Main scraping process: %s", e)
        click.echo(f"Scraping failed: {str(e)}", err=True)
        sys.exit(1)

    click.echo("\nScraping completed!")
    click.echo(format_summary(summary.to_json_dict()))
    click.echo(f"\nProducts written to {csv_path}")
    click.echo(f"Summary written to {summary_path}")

    if save:
        db = SessionLocal()
        try:
            init_db()
            run = create_run(db, base_url, description)
            add_products(db, run.id, products)
            finish_run(db, run.id, summary)
            click.echo(f"Saved {len(products)} products to database (run {run.id})")
        except sqlalchemy.exc.SQLAlchemyError as e:
            db.rollback()
            click.echo(f"Database error: {str(e)}")
            if ctx.obj["VERBOSE"]:
                click.echo(traceback.format_exc())
        finally:
            db.close()


@cli.command()
@click.option(
    "--file",
    "-f",
    "summary_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Summary file to show (default: the configured summary.json)",
)
def summary(summary_file):
    """Show the summary of the last scrape."""
    summary_file = summary_file or get_settings().SUMMARY_PATH
    try:
        data = read_summary(summary_file)
    except FileNotFoundError:
        click.echo(f"No summary found at {summary_file}. Run 'scrape' first.")
        return
    except ValueError as e:
        click.echo(f"Could not read summary: {str(e)}")
        return

    click.echo(format_summary(data))


@cli.command()
@click.option("--limit", "-l", type=int, default=10, help="Number of runs to show")
@click.pass_context
def runs(ctx, limit):
    """List scrape runs stored in the database."""
    db = SessionLocal()
    try:
        stored_runs = get_runs(db, limit=limit)
        if not stored_runs:
            click.echo("No runs found. Use 'scrape --save' to store one.")
            return

        table_data = []
        for run in stored_runs:
            table_data.append([
                run.id,
                run.timestamp.strftime("%Y-%m-%d %H:%M"),
                run.description or "",
                count_products(db, run.id),
                run.failed_products if run.failed_products is not None else "-",
                run.total_pages if run.total_pages is not None else "-",
            ])
        headers = ["Run ID", "Date", "Description", "Products", "Failed", "Pages"]
        click.echo(tabulate(table_data, headers=headers, tablefmt="grid"))
    except sqlalchemy.exc.SQLAlchemyError as e:
        click.echo(f"Database error: {str(e)}")
        click.echo("Try running the 'init' command first.")
        if ctx.obj["VERBOSE"]:
            click.echo(traceback.format_exc())
    finally:
        db.close()


@cli.command()
@click.option("--run-id", "-r", type=str, help="Show products from a specific run")
@click.option("--min-discount", "-m", type=int, default=None, help="Minimum discount percentage")
@click.option("--limit", "-l", type=int, default=50, help="Maximum products to show")
@click.pass_context
def products(ctx, run_id, min_discount, limit):
    """List products of a stored run (the latest run by default)."""
    db = SessionLocal()
    try:
        run = get_run(db, run_id) if run_id else get_latest_run(db)
        if not run:
            click.echo(f"Run {run_id} not found." if run_id else "No runs found in database.")
            return

        stored = get_products(db, run.id, min_discount=min_discount, limit=limit)
        click.echo(f"Run {run.id} ({run.timestamp.strftime('%Y-%m-%d %H:%M')})")
        if not stored:
            click.echo("No products match.")
            return

        click.echo(format_products(stored))
    except sqlalchemy.exc.SQLAlchemyError as e:
        click.echo(f"Database error: {str(e)}")
        if ctx.obj["VERBOSE"]:
            click.echo(traceback.format_exc())
    finally:
        db.close()


def format_summary(data):
    """Render a summary.json object as a two-column table."""
    rows = [
        ["Total products", data.get("totalProducts")],
        ["Failed products", data.get("failedProducts")],
        ["Pages", data.get("totalPages")],
        ["Duration", data.get("duration")],
        ["Success rate", data.get("successRate")],
    ]
    return tabulate(rows, tablefmt="grid")


def format_products(stored_products):
    """Render stored products as a table, truncating long names."""
    table_data = []
    for product in stored_products:
        name = product.name if len(product.name) <= 50 else product.name[:47] + "..."
        discount = f"{product.discount_percent}%" if product.discount_percent is not None else "N/A"
        table_data.append([
            name,
            product.original_price or "N/A",
            product.current_price,
            discount,
            product.rating,
        ])
    headers = ["Product", "Original", "Current", "Discount", "Rating"]
    return tabulate(table_data, headers=headers, tablefmt="grid")


if __name__ == "__main__":
    # This runs the Click application
    cli.main(obj={})
