import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from common.events import Event, PipelineStateEvent, RetryScheduledEvent
from coach.config import CoachConfig, ConfigError
from coach.conversation import Conversation
from coach.errors import CoachError, user_facing_message
from coach.history import SQLiteHistoryStore
from coach.pipeline import ChatPipeline
from coach.session import StaticSessionProvider

load_dotenv()


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

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_format == "json":
        handlers[0].setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=handlers)
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_context(pairs: list[str] | None) -> dict | None:
    if not pairs:
        return None
    context: dict = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"context entries must look like key=value, got {pair!r}")
        try:
            context[key.strip()] = json.loads(value)
        except ValueError:
            context[key.strip()] = value
    return context


def build_session(args: argparse.Namespace) -> StaticSessionProvider:
    session = StaticSessionProvider.from_env()
    if args.token:
        session.sign_in(args.token, args.user_id or session.user_id())
    if args.demo:
        session.start_demo()
    return session


def _load_config(args: argparse.Namespace, session: StaticSessionProvider) -> CoachConfig:
    config = CoachConfig.from_env()
    if args.no_history:
        config.history.backend = "none"
    config.validate(demo=session.is_demo())
    return config


def _on_event(verbose: bool):
    logger = logging.getLogger(__name__)

    def handle(event: Event) -> None:
        if isinstance(event, RetryScheduledEvent):
            print(
                f"... retrying ({event.attempt}/{event.max_attempts}) in {event.delay_seconds:.1f}s",
                file=sys.stderr,
            )
        elif isinstance(event, PipelineStateEvent) and verbose:
            logger.debug(f"state={event.state} identity={event.identity_kind}")

    return handle


def cmd_ask(args: argparse.Namespace) -> int:
    setup_logging(args.verbose, args.quiet, args.log_format)
    logger = logging.getLogger(__name__)

    session = build_session(args)
    try:
        config = _load_config(args, session)
        context = parse_context(args.context)
    except (ConfigError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}")
        return 1

    pipeline = ChatPipeline.from_config(config, session, on_event=_on_event(args.verbose))
    try:
        reply = pipeline.send_chat_message(args.message, context=context)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    except CoachError as e:
        logger.error(f"Chat failed: {e}")
        print(f"Error: {user_facing_message(e)}")
        return 1
    finally:
        pipeline.close()

    if args.json:
        print(reply.model_dump_json(indent=2))
    else:
        print(reply.content)
    return 0


def cmd_chat(args: argparse.Namespace) -> int:
    setup_logging(args.verbose, args.quiet, args.log_format)
    logger = logging.getLogger(__name__)

    session = build_session(args)
    try:
        config = _load_config(args, session)
        context = parse_context(args.context)
    except (ConfigError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}")
        return 1

    pipeline = ChatPipeline.from_config(config, session, on_event=_on_event(args.verbose))
    conversation = Conversation(pipeline, context=context)
    mode = "demo" if session.is_demo() else "live"
    print(f"Coach chat ({mode}). Type /clear to reset, /exit to quit.")

    try:
        while True:
            try:
                line = input("you> ")
            except EOFError:
                print()
                break
            text = line.strip()
            if text in ("/exit", "/quit"):
                break
            if text == "/clear":
                conversation.clear()
                print("(conversation cleared)")
                continue
            reply = conversation.send(text)
            if reply is not None:
                print(f"coach> {reply.content}\n")
            elif conversation.error:
                print(f"coach> {conversation.error}\n")
    except KeyboardInterrupt:
        print()
    finally:
        pipeline.close()
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    setup_logging(args.verbose, args.quiet, args.log_format)

    config = CoachConfig.from_env()
    user_id = args.user_id or StaticSessionProvider.from_env().user_id()
    if args.demo:
        user_id = config.demo.user_id
    if not user_id:
        print("Error: --user-id (or COACH_USER_ID) is required")
        return 1

    if not args.db and config.history.backend != "sqlite":
        print(
            f"Error: history is only readable from sqlite "
            f"(COACH_HISTORY_BACKEND={config.history.backend})"
        )
        return 1

    db_path = Path(args.db or config.history.db_path)
    if not db_path.exists():
        print(f"Error: no history database at {db_path}")
        return 1

    store = SQLiteHistoryStore(db_path)
    try:
        records = store.recent(user_id, limit=args.limit)
    finally:
        store.close()

    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        return 0
    if not records:
        print(f"No chat history for {user_id}")
        return 0
    for record in reversed(records):
        print(f"[{record.created_at.isoformat()}]")
        print(f"you>   {record.message}")
        print(f"coach> {record.response}\n")
    return 0


def _add_identity_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--demo", action="store_true", help="Use simulated demo replies")
    parser.add_argument("--token", help="Session access token (default: COACH_ACCESS_TOKEN)")
    parser.add_argument("--user-id", help="User id sent with requests (default: COACH_USER_ID)")
    parser.add_argument(
        "--context",
        "-c",
        action="append",
        metavar="KEY=VALUE",
        help="Health context passed to the coach (repeatable)",
    )
    parser.add_argument(
        "--no-history", action="store_true", help="Do not record the exchange"
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="coach",
        description="Coach - health coaching chat client",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimal logging (warnings/errors only)"
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log format (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    ask_parser = subparsers.add_parser("ask", help="Send one message and print the reply")
    ask_parser.add_argument("message", help="Message to send")
    ask_parser.add_argument("--json", action="store_true", help="Print the reply as JSON")
    _add_identity_args(ask_parser)

    chat_parser = subparsers.add_parser("chat", help="Interactive chat session")
    _add_identity_args(chat_parser)

    history_parser = subparsers.add_parser("history", help="Show recorded chat history")
    history_parser.add_argument("--user-id", help="User id (default: COACH_USER_ID)")
    history_parser.add_argument(
        "--demo", action="store_true", help="Show history of the demo user"
    )
    history_parser.add_argument("--db", help="SQLite history database path")
    history_parser.add_argument(
        "--limit", "-n", type=int, default=20, help="Number of exchanges (default: 20)"
    )
    history_parser.add_argument("--json", action="store_true", help="Print as JSON")

    args = parser.parse_args()

    if args.command == "ask":
        return cmd_ask(args)
    if args.command == "chat":
        return cmd_chat(args)
    if args.command == "history":
        return cmd_history(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
