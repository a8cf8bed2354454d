import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv

from gatewaychat.config import EnvCredentials, GatewayConfig
from gatewaychat.errors import ConfigurationError, PipelineError
from gatewaychat.models import Message, Session
from gatewaychat.pipeline import ChatPipeline
from gatewaychat.store import SessionStore
from gatewaychat.transport import build_transport


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        payload = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(verbose: bool = False, quiet: bool = False, log_format: str = "text") -> None:
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    if log_format == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)


def print_reply(message: Message) -> None:
    if message.reasoning:
        print("[reasoning]")
        print(message.reasoning)
        print()
    print(message.content)


def print_session(session: Session) -> None:
    print(f"# {session.title}  ({session.id}, model={session.model_id or 'default'})")
    for message in session.messages:
        print(f"{message.role.value}: {message.content}")


async def _send(pipeline: ChatPipeline, session: Session, text: str | None) -> Message:
    async with pipeline:
        if text is None:
            return await pipeline.complete(session)
        return await pipeline.send(session, text)


def cmd_send(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    logger = logging.getLogger(__name__)
    session = store.current_session()
    if args.model:
        session.set_model(args.model)
        store.save(session)

    pipeline = ChatPipeline(config, EnvCredentials(), build_transport(config), store)
    text = None if args.command == "retry" else args.text
    try:
        reply = asyncio.run(_send(pipeline, session, text))
    except PipelineError as e:
        logger.debug("Send failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_reply(reply)
    return 0


def cmd_new(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    session = store.create_session(model_id=args.model or config.default_model)
    print(session.id)
    return 0


def cmd_sessions(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    current = store.current_session_id
    for session in store.list_sessions():
        marker = "*" if session.id == current else " "
        updated = session.last_updated_at.strftime("%Y-%m-%d %H:%M")
        print(f"{marker} {session.id}  {updated}  {session.title}")
    return 0


def cmd_show(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    print_session(store.current_session())
    return 0


def cmd_switch(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    try:
        session = store.switch_to(args.session_id)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    print_session(session)
    return 0


def cmd_rename(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    try:
        session = store.rename_session(args.session_id, args.title)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    print(session.title)
    return 0


def cmd_delete(args: argparse.Namespace, config: GatewayConfig, store: SessionStore) -> int:
    try:
        replacement = store.delete_session(args.session_id)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    if replacement is not None:
        print(f"Current session is now {replacement.id}")
    return 0


COMMANDS = {
    "send": cmd_send,
    "retry": cmd_send,
    "new": cmd_new,
    "sessions": cmd_sessions,
    "show": cmd_show,
    "switch": cmd_switch,
    "rename": cmd_rename,
    "delete": cmd_delete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatewaychat", description="Chat with models behind a LiteLLM-compatible gateway"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Warnings only")
    parser.add_argument("--log-format", choices=["text", "json"], default="text")

    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send a message in the current session")
    send.add_argument("text")
    send.add_argument("--model", help="Switch the session to this model first")

    retry = sub.add_parser("retry", help="Ask again for the last unanswered message")
    retry.add_argument("--model", help="Switch the session to this model first")

    new = sub.add_parser("new", help="Start a new session")
    new.add_argument("--model")

    sub.add_parser("sessions", help="List sessions, newest first")
    sub.add_parser("show", help="Print the current session")

    switch = sub.add_parser("switch", help="Make a session current")
    switch.add_argument("session_id")

    rename = sub.add_parser("rename", help="Rename a session")
    rename.add_argument("session_id")
    rename.add_argument("title")

    delete = sub.add_parser("delete", help="Delete a session")
    delete.add_argument("session_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.log_format)
    logger = logging.getLogger(__name__)

    try:
        config = GatewayConfig.from_env()
        config.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    store = SessionStore(config.data_dir, default_model=config.default_model)
    return COMMANDS[args.command](args, config, store)


if __name__ == "__main__":
    sys.exit(main())
