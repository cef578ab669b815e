"""
src/app.py

Terminal front end. Prompts go to the background worker; the foreground polls
for replies on a fixed cadence and never waits on the model itself.
"""


import argparse
import logging
import sys
import time
from functools import partial
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from config import Settings, configure_logging, get_settings
from orchestrator.errors import TransportError
from orchestrator.llm_openai import OpenAIChatClient
from orchestrator.models import Answer, Reply, StepEvent
from orchestrator.worker import WorkerBridge
from tools.defaults import build_default_registry


logger = logging.getLogger(__name__)

APP_TITLE = "Tool Chat"
APP_DESC = (
    "Ask anything. The model may call local tools (constants, add, number guess, "
    "docs, web search) before answering. Type /quit or press Ctrl+D to leave."
)
QUIT_COMMANDS = {"/quit", "/exit"}


class ChatFrontend:
    """
    Foreground state: at most one outstanding prompt, enforced with `pending`.
    Only the bridge's queue methods are used from here.
    """

    def __init__(self, bridge: WorkerBridge):

        self.bridge = bridge
        self.pending = False
        self.last_submitted: Optional[str] = None
        self.last_reply: Optional[Reply] = None

    def submit_prompt(self, text: str) -> bool:
        """Send `text` unless it is blank or a prompt is still in flight."""

        text = text.strip()
        if not text or self.pending:
            return False

        self.last_submitted = text
        self.last_reply = None
        self.pending = True
        self.bridge.submit(text)
        logger.info("Prompt submitted (%d chars)", len(text))

        return True

    def check_response(self) -> Optional[Reply]:
        """Non-blocking poll; clears `pending` when a reply lands."""

        reply = self.bridge.poll()
        if reply is None:
            return None

        self.last_reply = reply
        self.pending = False
        logger.info("Reply received: ok=%s", reply.ok)

        return reply

    def drain_events(self) -> List[StepEvent]:

        return self.bridge.drain_events()


# -------- Rendering ------------------------------------------------------------


def render_event(console: Console, event: StepEvent) -> None:

    console.print(f"[dim]{escape(str(event))}[/dim]")


def render_reply(console: Console, reply: Reply) -> None:

    if isinstance(reply, Answer):
        console.print(escape(reply.text))
        console.print(f"[dim]({reply.steps} step{'s' if reply.steps != 1 else ''})[/dim]")
        return

    tool = f" [{reply.tool_name}]" if reply.tool_name else ""
    console.print(f"[bold red]{reply.kind}{escape(tool)}:[/bold red] {escape(reply.message)}")


def wait_for_reply(frontend: ChatFrontend, console: Console, settings: Settings, verbose: bool = False) -> Reply:
    """Poll every `poll_interval_ms` under a spinner until the reply arrives."""

    with console.status("Thinking..."):
        while True:
            for event in frontend.drain_events():
                if verbose:
                    render_event(console, event)
            reply = frontend.check_response()
            if reply is not None:
                break
            time.sleep(settings.poll_interval)

    # Events emitted just before the reply
    for event in frontend.drain_events():
        if verbose:
            render_event(console, event)

    return reply


# -------- Modes ----------------------------------------------------------------


def run_interactive(frontend: ChatFrontend, console: Console, settings: Settings, verbose: bool = False) -> int:

    console.print(f"[bold]{APP_TITLE}[/bold]")
    console.print(APP_DESC)

    while True:
        try:
            text = console.input("[bold cyan]> [/bold cyan]")
        except (EOFError, KeyboardInterrupt):
            console.print()
            return 0

        if text.strip() in QUIT_COMMANDS:
            return 0
        if not frontend.submit_prompt(text):
            continue

        render_reply(console, wait_for_reply(frontend, console, settings, verbose))


def run_single(frontend: ChatFrontend, console: Console, settings: Settings, prompt: str, verbose: bool = False) -> int:

    if not frontend.submit_prompt(prompt):
        console.print("[bold red]Empty prompt[/bold red]")
        return 2

    reply = wait_for_reply(frontend, console, settings, verbose)
    render_reply(console, reply)

    return 0 if reply.ok else 1


def positive_int(value: str) -> int:

    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")

    return number


def build_parser() -> argparse.ArgumentParser:

    parser = argparse.ArgumentParser(prog="toolchat", description=APP_DESC)
    parser.add_argument("prompt", nargs="?", help="Ask once and exit. Omit for the interactive prompt.")
    parser.add_argument("--once", action="store_true", help="Single request without tools (needs a prompt)")
    parser.add_argument("--max-loops", type=positive_int, default=None, help="Step budget per prompt (at least 1)")
    parser.add_argument("--model", default=None, help="Override the OpenAI model")
    parser.add_argument("--keep-history", action="store_true", default=None, help="Carry the conversation across prompts")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print step events while waiting")

    return parser


def main(argv: Optional[List[str]] = None) -> int:

    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.model:
        settings = settings.model_copy(update={"openai_model": args.model})
    configure_logging(settings)

    console = Console()
    client = OpenAIChatClient(settings)

    if args.once:
        if not args.prompt:
            console.print("[bold red]--once needs a prompt[/bold red]")
            return 2
        try:
            console.print(escape(client.answer_once(args.prompt)))
        except TransportError as e:
            console.print(f"[bold red]{e.kind}:[/bold red] {e}")
            return 1
        return 0

    bridge = WorkerBridge(
        client=client,
        registry_factory=partial(build_default_registry, settings),
        settings=settings,
        max_loops=args.max_loops,
        keep_history=args.keep_history,
    )
    bridge.start()
    frontend = ChatFrontend(bridge)

    try:
        if args.prompt:
            return run_single(frontend, console, settings, args.prompt, args.verbose)
        return run_interactive(frontend, console, settings, args.verbose)
    finally:
        bridge.stop(timeout=1.0)


if __name__ == "__main__":

    sys.exit(main())

# EOF
