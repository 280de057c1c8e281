"""Command-line interface for the user management console."""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from typing import Callable, Sequence

from userconsole.config import ConsoleSettings, load_settings
from userconsole.controller import DashboardController
from userconsole.models import Record
from userconsole.notifications import NotificationCenter
from userconsole.transport import RecordTransport, TransportError

logger = logging.getLogger("userconsole.main")

InputFunc = Callable[[str], str]


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management console utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the web console")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the console")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the web console (default: 8000)",
    )

    subparsers.add_parser("admin", help="Launch the interactive text console")
    subparsers.add_parser("check", help="Print the resolved service endpoints")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "admin", "check"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(settings: ConsoleSettings, *, host: str, port: int) -> None:
    from userconsole.web import create_app
    import uvicorn

    logger.info("Starting user console on http://%s:%s", host, port)
    app = create_app(settings=settings)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _print_endpoints(settings: ConsoleSettings) -> None:
    endpoints = settings.endpoints
    print(f"list:   {endpoints.list_url}")
    print(f"get:    {endpoints.get_url}")
    print(f"create: {endpoints.create_url}")
    print(f"update: {endpoints.update_url}")
    print(f"delete: {endpoints.delete_url}")
    timeout = f"{settings.timeout:g}s" if settings.timeout else "none"
    print(f"timeout: {timeout}")


def _print_notification(controller: DashboardController) -> None:
    notification = controller.notification
    if notification is not None:
        print(f"[{notification.kind}] {notification.message}")


def _list_users(controller: DashboardController) -> None:
    records = controller.state.records
    if not records:
        print("No users yet. Get started by creating your first user!")
        return

    print(f"Users ({len(records)}):")
    print(f"{'ID':<24}  {'Name':<24}  {'Email':<32}  Age")
    print("-" * 90)
    for record in records:
        print(f"{record.id or '':<24}  {record.name:<24}  {record.email:<32}  {record.age}")


def _choose_record(controller: DashboardController, input_func: InputFunc) -> Record | None:
    record_id = input_func("User id: ").strip()
    if not record_id:
        return None
    record = controller.list_view.find(record_id)
    if record is None:
        print(f"No listed user has id {record_id}.")
    return record


async def _fill_form(controller: DashboardController, input_func: InputFunc) -> None:
    form = controller.form
    if form is None:
        return
    draft = form.draft
    for field in ("name", "email", "age"):
        value = input_func(f"{field.capitalize()} [{draft[field]}]: ").strip()
        if value:
            form.set_field(field, value)
    if input_func("Save? [Y/n]: ").strip().lower() in {"", "y", "yes"}:
        await form.submit()
    else:
        form.cancel()
        print("Cancelled.")


async def _show_user(transport: RecordTransport, input_func: InputFunc) -> None:
    record_id = input_func("User id: ").strip()
    if not record_id:
        return
    try:
        record = await transport.get_by_id(record_id)
    except TransportError as exc:
        print("User not found." if exc.is_not_found else f"Failed to fetch user: {exc}")
        return
    created_at = record.created_datetime
    created = created_at.isoformat() if created_at else "unknown"
    print(f"{record.id}: {record.name} <{record.email}>, age {record.age}, created {created}")


async def _run_admin_console(settings: ConsoleSettings, input_func: InputFunc = input) -> None:
    """Provide an interactive text console driving the dashboard controller."""

    def confirm(record: Record) -> bool:
        answer = input_func(f"Are you sure you want to delete {record.name}? [y/N]: ")
        return answer.strip().lower() in {"y", "yes"}

    async with RecordTransport(settings.endpoints, timeout=settings.timeout) as transport:
        controller = DashboardController(
            transport,
            notifications=NotificationCenter(delay=settings.notification_seconds),
            confirm_delete=confirm,
        )
        await controller.mount()
        _print_notification(controller)

        print("User Management Console")
        print("Press Ctrl+C at any time to exit.\n")

        try:
            while True:
                print("Select an option:")
                print("  1) List all users")
                print("  2) Show a user")
                print("  3) Add a new user")
                print("  4) Edit a user")
                print("  5) Delete a user")
                print("  6) Refresh")
                print("  7) Exit")

                choice = input_func("Enter choice [1-7]: ").strip()

                if choice == "1":
                    _list_users(controller)
                elif choice == "2":
                    await _show_user(transport, input_func)
                elif choice == "3":
                    if controller.form is not None:
                        controller.cancel_form()
                    if controller.open_create():
                        await _fill_form(controller, input_func)
                    else:
                        print("A save is still in progress; try again shortly.")
                elif choice == "4":
                    record = _choose_record(controller, input_func)
                    if record is not None:
                        controller.list_view.edit(record)
                        await _fill_form(controller, input_func)
                elif choice == "5":
                    record = _choose_record(controller, input_func)
                    if record is not None:
                        await controller.list_view.delete(record)
                elif choice == "6":
                    await controller.refresh()
                elif choice == "7":
                    print("Goodbye!")
                    return
                else:
                    print("Invalid selection. Please choose a number from the menu.\n")
                    continue

                _print_notification(controller)
                controller.notifications.dismiss()
                print()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting console.")
        finally:
            await controller.unmount()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = load_settings()

    if args.command == "serve":
        _serve(settings, host=args.host, port=args.port)
    elif args.command == "admin":
        asyncio.run(_run_admin_console(settings))
    elif args.command == "check":
        _print_endpoints(settings)


if __name__ == "__main__":
    main()
