import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from models.errors import ClaritoolError
from orchestrator.core import ClaritoolOrchestrator
from orchestrator.routing_types import ChatMode
from tools.web import format_search_context


def show_loading_animation(stop_event: threading.Event, label: str) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
        label: Text shown before the spinner
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93m{label} {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 30 + '\r')
    sys.stdout.flush()


async def with_spinner(label: str, coro):
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation, label))
    loading_thread.daemon = True
    loading_thread.start()
    try:
        return await coro
    finally:
        stop_animation.set()
        loading_thread.join()


def print_help() -> None:
    print("\n=== Available Commands ===")
    print("/think        - Toggle think mode (answer is refined before it is shown)")
    print("/search <q>   - Search the web and use the result as context for the next question")
    print("/model <id>   - Prefer a model (empty to clear)")
    print("/models       - List enabled models")
    print("/logs         - Show activity statistics")
    print("help          - Show this help message")
    print("exit/quit     - Exit the program\n")


async def chat_loop(orchestrator: ClaritoolOrchestrator) -> None:
    history: list[dict] = []
    mode = ChatMode.QUICK.value
    preferred_model: str | None = None
    pending_context: str | None = None

    print("\n=== Claritool Chat ===")
    print("Type 'exit' to quit or 'help' for commands\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "You: ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting...")
            break

        if not user_input:
            continue

        command = user_input.lower()
        if command in ('exit', 'quit'):
            print("\nGoodbye!")
            break

        if command == 'help':
            print_help()
            continue

        if command == '/think':
            mode = ChatMode.QUICK.value if mode == ChatMode.THINK.value else ChatMode.THINK.value
            print(f"Mode: {mode}\n")
            continue

        if command.startswith('/model') and not command.startswith('/models'):
            preferred_model = user_input[len('/model'):].strip() or None
            print(f"Preferred model: {preferred_model or '(registry order)'}\n")
            continue

        if command == '/models':
            for m in orchestrator.registry.list_enabled_models():
                print(f"  {m.id:<45} {m.display_name} [{m.capability.value}]")
            print()
            continue

        if command == '/logs':
            stats = await orchestrator.activity_stats()
            print(f"\nTotal: {stats['total']}  Today: {stats['today']}")
            for entry in stats['logs'][:10]:
                print(f"  {entry.get('time')}  {entry.get('mode'):<6} {entry.get('model')}  {entry.get('query')}")
            print()
            continue

        if command.startswith('/search'):
            query = user_input[len('/search'):].strip()
            if not query:
                print("Usage: /search <query>\n")
                continue
            try:
                result = await with_spinner("Searching", orchestrator.search(query))
            except ValueError as e:
                print(f"\nError: {e}\n")
                continue
            pending_context = format_search_context(result) or None
            if pending_context:
                print(f"\n{pending_context}\n\n[Context attached to your next question]\n")
            else:
                print("\nNo results found.\n")
            continue

        history.append({"role": "user", "content": user_input})
        label = "Thinking deeply" if mode == ChatMode.THINK.value else "Thinking"
        try:
            result = await with_spinner(
                label,
                orchestrator.chat(
                    history,
                    mode=mode,
                    search_context=pending_context,
                    preferred_model=preferred_model,
                    endpoint="cli",
                ),
            )
        except ClaritoolError as e:
            history.pop()
            print(f"\nError: {e.message}\n")
            continue

        pending_context = None
        history.append({"role": "assistant", "content": result.text})
        print(f"\nAI ({result.model_name}): {result.text}")
        if result.refinement_rounds:
            print(f"[Refined {result.refinement_rounds}x]")
        print()


async def run() -> None:
    orchestrator = ClaritoolOrchestrator.from_config()
    try:
        await chat_loop(orchestrator)
    finally:
        await orchestrator.aclose()


def main():
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\nExiting...")


if __name__ == "__main__":
    main()
