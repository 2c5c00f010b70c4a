"""Interactive console front end for the catalog."""

import click

from client import DEFAULT_BACKEND_URL, CatalogClient, CatalogSession
from config import configure_logging

LOGGED_OUT_COMMANDS = ["submit", "toggle", "quit"]
LOGGED_IN_COMMANDS = ["add", "edit", "cancel", "delete", "filter", "all", "featured", "quit"]


def render_grid(products):
    if not products:
        click.echo("(no products)")
        return
    for i, p in enumerate(products, 1):
        line = f"[{i}] {p.get('productId')}: {p.get('name')}  ${p.get('price')}  {p.get('company')}  rating {p.get('rating')}"
        if p.get("featured"):
            line += "  Featured"
        click.echo(line)


def _pick(session: CatalogSession):
    if not session.products:
        click.echo("Nothing to pick from.")
        return None
    index = click.prompt("Product #", type=click.IntRange(1, len(session.products)))
    return session.products[index - 1]


def _fill_form(session: CatalogSession):
    form = session.form
    form["name"] = click.prompt("Name", default=form["name"] or None)
    form["price"] = click.prompt("Price", type=click.FloatRange(min=0), default=form["price"] if form["price"] != "" else None)
    form["company"] = click.prompt("Company", default=form["company"] or None)
    form["rating"] = click.prompt("Rating", type=click.FloatRange(0, 5), default=form["rating"] if form["rating"] not in ("", None) else 0)
    form["featured"] = click.confirm("Featured product", default=form["featured"])


def logged_out_step(session: CatalogSession) -> bool:
    click.echo(f"-- {session.auth_mode.capitalize()} --")
    command = click.prompt("Command", type=click.Choice(LOGGED_OUT_COMMANDS), default="submit")
    if command == "quit":
        return False
    if command == "toggle":
        session.toggle_auth_mode()
        return True
    email = click.prompt("Email")
    password = click.prompt("Password", hide_input=True)
    if session.auth_mode == "login":
        session.submit_login(email, password)
    else:
        session.submit_signup(email, password)
    return True


def logged_in_step(session: CatalogSession) -> bool:
    click.echo("-- Update Product --" if session.editing else "-- Add Product --")
    render_grid(session.products)
    command = click.prompt("Command", type=click.Choice(LOGGED_IN_COMMANDS), default="all")
    if command == "quit":
        return False
    if command == "add":
        session.cancel_edit()
        _fill_form(session)
        session.submit_product()
    elif command == "edit":
        product = _pick(session)
        if product is not None:
            session.start_edit(product)
            _fill_form(session)
            session.submit_product()
    elif command == "cancel":
        session.cancel_edit()
    elif command == "delete":
        product = _pick(session)
        if product is not None:
            session.delete(product["id"])
    elif command == "filter":
        session.price_filter = click.prompt(
            "Max price", type=click.FloatRange(0, session.max_price), default=session.price_filter
        )
        session.rating_filter = click.prompt("Min rating", type=click.FloatRange(0, 5), default=session.rating_filter)
        session.apply_filters()
    elif command == "featured":
        session.show_featured()
    else:
        session.show_all()
    return True


@click.command()
@click.option("--backend-url", envvar="BACKEND_URL", default=DEFAULT_BACKEND_URL, show_default=True)
@click.option("--log-level", default="WARNING", show_default=True)
def main(backend_url, log_level):
    """Log in and manage the product catalog from the terminal."""
    configure_logging(log_level)
    api = CatalogClient(backend_url)
    session = CatalogSession(api, alert=lambda message: click.echo(f"! {message}"))
    try:
        running = True
        while running:
            step = logged_in_step if session.logged_in else logged_out_step
            running = step(session)
    finally:
        api.close()


if __name__ == "__main__":
    main()
