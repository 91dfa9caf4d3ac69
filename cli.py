"""CLI commands for event pages management."""

import asyncio
from uuid import UUID

import typer

from eventpages.auth.backend import SqlAuthBackend
from eventpages.auth.dtos import AuthError
from eventpages.auth.session import SessionStore
from eventpages.config.logging import setup_logging
from eventpages.email_service import get_email_service
from eventpages.events.guest_list import GuestFilter
from eventpages.events.lifecycle import (
    DeletionConfirmation,
    ErrorKind,
    EventLifecycleService,
    OperationResult,
)
from eventpages.events.notifications import NotificationEvent, NotificationKind
from eventpages.events.repository import EventRepository
from eventpages.store.sql_client import SqlStoreClient

app = typer.Typer(help="CLI commands for event pages management")

NOTIFICATION_COLORS = {
    NotificationKind.SUCCESS: typer.colors.GREEN,
    NotificationKind.ERROR: typer.colors.RED,
    NotificationKind.WARNING: typer.colors.YELLOW,
    NotificationKind.INFO: typer.colors.BLUE,
}


def echo_notification(notification: NotificationEvent) -> None:
    color = NOTIFICATION_COLORS[notification.kind]
    typer.secho(notification.title, fg=color)
    if notification.detail:
        typer.secho(f"  {notification.detail}", fg=color)


async def _signed_in_service(email: str, password: str) -> EventLifecycleService:
    session = SessionStore(SqlAuthBackend())
    await session.sign_in(email, password)
    return EventLifecycleService(
        session=session,
        repository=EventRepository(SqlStoreClient()),
        notify=echo_notification,
    )


def _run_signed_in(email: str, password: str, operation) -> tuple[OperationResult, EventLifecycleService]:
    """Sign in, run ``operation(service)`` and exit non-zero when it failed."""

    async def _run():
        service = await _signed_in_service(email, password)
        return await operation(service), service

    try:
        result, service = asyncio.run(_run())
    except AuthError as e:
        typer.secho(e.user_message, fg=typer.colors.RED)
        raise typer.Exit(1)
    if not result.ok:
        raise typer.Exit(0 if result.error is ErrorKind.CANCELLED else 1)
    return result, service


EMAIL_OPTION = typer.Option(..., "--email", "-e", help="Email of the account")
PASSWORD_OPTION = typer.Option(..., "--password", "-p", prompt=True, hide_input=True)


@app.command()
def signup(
    email: str = EMAIL_OPTION,
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True),
    full_name: str = typer.Option(
        None,
        "--full-name",
        "-n",
        help="Name used in the confirmation email",
    ),
):
    """Create an account and send the confirmation email."""
    backend = SqlAuthBackend(email_service=get_email_service())
    try:
        result = asyncio.run(backend.sign_up(email, password, full_name))
    except AuthError as e:
        typer.secho(e.user_message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Account created!", fg=typer.colors.GREEN)
    typer.secho(f"  User ID: {result.user_id}", fg=typer.colors.CYAN)
    if result.confirmation_required:
        typer.secho("  Check your inbox to confirm the address before signing in.", fg=typer.colors.YELLOW)


@app.command()
def confirm(
    token: str = typer.Argument(
        ...,
        help="Token from the confirmation link",
    ),
):
    """Confirm an email address with the token from the sign-up email."""
    try:
        identity = asyncio.run(SqlAuthBackend().confirm_email(token))
    except AuthError as e:
        typer.secho(e.user_message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"Email {identity.email} confirmed!", fg=typer.colors.GREEN)


@app.command()
def list_events(email: str = EMAIL_OPTION, password: str = PASSWORD_OPTION):
    """List your events, newest first."""
    result, service = _run_signed_in(email, password, lambda service: service.list_my_events())
    for event in result.value:
        visibility = "public" if event.is_public else "private"
        typer.secho(
            f"  {event.id}  {event.event_date}  {event.title} ({event.type.value}, {visibility})",
            fg=typer.colors.BLUE,
        )

    stats = service.stats()
    typer.echo()
    typer.secho(
        f"Total: {stats.total}  Public: {stats.public}  Upcoming: {stats.upcoming}",
        fg=typer.colors.MAGENTA,
    )


@app.command()
def guests(
    event_id: str = typer.Argument(
        ...,
        help="Event UUID",
    ),
    status: GuestFilter = typer.Option(GuestFilter.ALL, "--status", "-s", help="Only confirmed or pending guests"),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
):
    """Show who answered an invitation, newest first."""
    result, _ = _run_signed_in(email, password, lambda service: service.list_guests(UUID(event_id), status))
    guest_list = result.value
    for guest in guest_list.guests:
        answer = "confirmed" if guest.confirmed else "pending"
        plus_one = " +1" if guest.plus_one else ""
        contact = guest.email or guest.phone or "-"
        typer.secho(f"  {guest.name}{plus_one}  {contact}  ({answer})", fg=typer.colors.BLUE)

    stats = guest_list.stats
    typer.echo()
    typer.secho(
        f"Total: {stats.total}  Confirmed: {stats.confirmed}  Pending: {stats.pending}  "
        f"Plus ones: {stats.plus_ones}  Expected: {stats.expected_attendees}",
        fg=typer.colors.MAGENTA,
    )


@app.command()
def publish(
    event_id: str = typer.Argument(
        ...,
        help="Event UUID",
    ),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
):
    """Toggle an event between public and private."""
    result, _ = _run_signed_in(email, password, lambda service: service.toggle_publish(UUID(event_id)))
    if result.value.is_public:
        typer.secho(f"  Visible at /event/{result.value.id}", fg=typer.colors.CYAN)


@app.command()
def delete_event(
    event_id: str = typer.Argument(
        ...,
        help="Event UUID",
    ),
    email: str = EMAIL_OPTION,
    password: str = PASSWORD_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete an event together with its guests, gifts and messages."""

    def confirm_deletion(confirmation: DeletionConfirmation) -> bool:
        if yes:
            return True
        return typer.confirm(confirmation.text)

    result, _ = _run_signed_in(
        email, password, lambda service: service.delete_event(UUID(event_id), confirm_deletion)
    )
    for outcome in result.value.outcomes:
        typer.secho(f"  {outcome.table.value}: {outcome.status.value} ({outcome.deleted})", fg=typer.colors.CYAN)


if __name__ == "__main__":
    setup_logging()
    app()
