"""
Command-line interface for Rosie.

A plain line-based console: it prints what the event bus reports and feeds
user lines and approval decisions back in. All real work happens in
AgentLoop.
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from rosie import __version__
from rosie.config.schema import AgentConfig
from rosie.config.settings import settings
from rosie.domain import SandboxError
from rosie.events import (
    AgentError,
    AgentText,
    AgentTextDone,
    AgentToolRequest,
    EventBus,
    EventType,
    SystemError,
    SystemShutdown,
    ToolApprovalRequired,
    ToolApproved,
    ToolComplete,
    ToolDenied,
    SessionContextTrimmed,
)
from rosie.providers import ProviderConfig, create_provider
from rosie.runtime import AgentLoop
from rosie.runtime.tool_executor import describe_input
from rosie.session import SessionRecorder
from rosie.tools import configure_sandbox, create_builtin_tools
from rosie.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

PREVIEW_CHARS = 300


def _print(text: str = "", end: str = "\n") -> None:
    sys.stdout.write(text + end)
    sys.stdout.flush()


class Console:
    """Renders bus events on stdout and asks for approvals on stdin."""

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._streamed = False
        bus.subscribe(EventType.AGENT_TEXT, self.on_text)
        bus.subscribe(EventType.AGENT_TEXT_DONE, self.on_text_done)
        bus.subscribe(EventType.AGENT_TOOL_REQUEST, self.on_tool_request)
        bus.subscribe(EventType.TOOL_APPROVAL_REQUIRED, self.on_approval_required)
        bus.subscribe(EventType.TOOL_COMPLETE, self.on_tool_complete)
        bus.subscribe(EventType.AGENT_ERROR, self.on_error)
        bus.subscribe(EventType.SYSTEM_ERROR, self.on_system_error)
        bus.subscribe(EventType.SESSION_CONTEXT_TRIMMED, self.on_trimmed)

    def on_text(self, event: AgentText) -> None:
        self._streamed = True
        _print(event.delta, end="")

    def on_text_done(self, event: AgentTextDone) -> None:
        if self._streamed:
            _print()
        self._streamed = False

    def on_tool_request(self, event: AgentToolRequest) -> None:
        _print(f"→ {event.tool_name}({describe_input(event.input)})")

    async def on_approval_required(self, event: ToolApprovalRequired) -> None:
        prompt = f"Allow {event.tool_name}({describe_input(event.input)})? [y/N] "
        try:
            answer = await asyncio.to_thread(input, prompt)
        except EOFError:
            answer = ""
        if answer.strip().lower() in ("y", "yes"):
            self.bus.publish(ToolApproved(tool_id=event.tool_id))
        else:
            self.bus.publish(ToolDenied(tool_id=event.tool_id))

    def on_tool_complete(self, event: ToolComplete) -> None:
        marker = "✗" if event.is_error else "✓"
        preview = event.content
        if len(preview) > PREVIEW_CHARS:
            preview = preview[:PREVIEW_CHARS] + "..."
        _print(f"{marker} {event.tool_name} ({event.duration_ms}ms)")
        if preview:
            _print("  " + preview.replace("\n", "\n  "))

    def on_error(self, event: AgentError) -> None:
        _print(f"error: {event.message}")

    def on_system_error(self, event: SystemError) -> None:
        _print(f"system error: {event.message}")

    def on_trimmed(self, event: SessionContextTrimmed) -> None:
        _print(f"(context trimmed: {event.removed_messages} messages dropped)")


async def run(args: argparse.Namespace) -> int:
    try:
        sandbox = configure_sandbox(args.root or settings.project_root or Path.cwd())
    except SandboxError as e:
        _print(f"error: {e}")
        return 2

    provider_name = args.provider or settings.provider
    api_key = settings.resolve_api_key(provider_name)
    if not api_key:
        _print(f"error: no API key configured for provider '{provider_name}'")
        return 2

    provider = create_provider(
        ProviderConfig(
            provider=provider_name,
            api_key=api_key,
            model=args.model or settings.model,
            base_url=settings.base_url,
        )
    )

    config = AgentConfig.from_settings(settings)
    if args.yes:
        config = config.model_copy(update={"confirm_destructive": False})

    bus = EventBus()
    Console(bus)
    recorder = SessionRecorder(
        bus, settings.sessions_dir, max_sessions=settings.max_sessions, cwd=str(sandbox.root)
    )
    recorder.start()
    agent = AgentLoop(provider, create_builtin_tools(sandbox), bus, config=config)

    _print(f"rosie {__version__} · {provider.label} · {provider.model_name}")
    _print(f"project: {sandbox.root}  (/clear to reset, /exit to quit)")

    loop = asyncio.get_running_loop()
    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            text = line.strip()
            if not text:
                continue
            if text in ("/exit", "/quit"):
                break
            if text == "/clear":
                agent.clear_history()
                _print("(history cleared)")
                continue

            loop.add_signal_handler(signal.SIGINT, agent.cancel)
            try:
                await agent.process_message(text)
                await bus.drain()
            finally:
                loop.remove_signal_handler(signal.SIGINT)
    finally:
        bus.publish(SystemShutdown(reason="user exit"))
        agent.dispose()
        recorder.close()
        await provider.aclose()

    return 0


def main():
    parser = argparse.ArgumentParser(description="Rosie - terminal coding assistant")
    parser.add_argument(
        "--provider",
        choices=["anthropic", "openai", "xai", "google", "openrouter", "custom"],
        help="Model vendor (default: ROSIE_PROVIDER or anthropic)",
    )
    parser.add_argument("--model", help="Model identifier (default: vendor default)")
    parser.add_argument("--root", type=Path, help="Project root (default: current directory)")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Run write, edit and shell tools without asking for approval",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr diagnostics",
    )
    parser.add_argument("--version", action="version", version=f"rosie {__version__}")

    args = parser.parse_args()
    configure_logging(args.log_level, json_output=settings.log_json)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        _print("\nbye")
        sys.exit(0)


if __name__ == "__main__":
    main()
