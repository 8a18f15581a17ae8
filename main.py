import argparse
import sys
import threading
import time
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from api.solar_client import SolarClient
from config.config import Config
from context.refinement_session import RefinementSession
from models.project import ProjectSpec
from orchestrator.pipeline import PipelineOrchestrator
from orchestrator.pipeline_types import EventType
from orchestrator.refinement_chat import RefinementChat
from tools.web import create_scraper, create_search_client
from utils.errors import ContentPipelineError


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93mThinking {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 20 + '\r')
    sys.stdout.flush()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a structured document from an outline")
    parser.add_argument("--title", required=True, help="Project title")
    parser.add_argument("--type", dest="content_type", default="blogPost", help="Content type, e.g. blogPost")
    parser.add_argument("--outline-file", required=True, help="File with one section title per line")
    parser.add_argument("--source-file", action="append", default=[], help="Plain-text source file (repeatable)")
    parser.add_argument("--url", help="Web page to scrape as additional source material")
    return parser.parse_args(argv)


def build_project(args: argparse.Namespace, config: Config) -> ProjectSpec:
    outline = Path(args.outline_file).read_text(encoding="utf-8")
    file_texts = [Path(p).read_text(encoding="utf-8") for p in args.source_file]

    url_content = ""
    if args.url:
        page = create_scraper(config).scrape(args.url)
        print(f"Scraped '{page.title}' ({page.word_count} words)")
        url_content = page.text

    return ProjectSpec.from_sources(
        title=args.title,
        content_type=args.content_type,
        outline=outline,
        url_content=url_content,
        file_texts=file_texts,
    )


def print_event(event) -> None:
    data = event.data
    if event.type is EventType.PHASE:
        print(f"\n[{data['progress']:>3}%] {data['message']}")
    elif event.type is EventType.SECTION:
        if data["status"] == "writing":
            print(f"\n--- {data['title']} ---")
        elif data["status"] == "completed":
            print(f"\n[{data['progress']:>3}%] Finished: {data['title']}")
    elif event.type in (EventType.PROGRESS, EventType.KEYWORDS, EventType.SEARCH_RESULTS):
        print(f"  {data['message']}")
    elif event.type in (EventType.CONTENT, EventType.DOCUMENT):
        sys.stdout.write(data["content"])
        sys.stdout.flush()
    elif event.type is EventType.ERROR:
        print(f"\n  Error: {data['message']}")


def run_pipeline(orchestrator: PipelineOrchestrator, project: ProjectSpec):
    """
    Print the run as it happens, including the final polish pass.

    When the polish pass fails or is cut off, the concatenated sections are
    printed instead.
    """
    pipeline_run = orchestrator.start(project, streaming=True)
    document_started = False
    for event in pipeline_run.stream_all():
        if event.type is EventType.DOCUMENT and not document_started:
            print(f"\n=== {project.title} ===\n")
            document_started = True
        print_event(event)

    final = pipeline_run.final
    if final.coherence_applied:
        print()
    else:
        print(f"\n=== {project.title} ===\n\n{final.text}")
    return final


def chat_loop(session: RefinementSession) -> None:
    print("\n=== Refinement Chat ===")
    print("Type 'exit' to quit, 'show' to print the document, or 'help' for commands\n")

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            if user_input.lower() in ('exit', 'quit'):
                print("\nGoodbye!")
                break

            if user_input.lower() == 'show':
                print(f"\n{session.content}\n")
                continue

            if user_input.lower() == 'help':
                print("\n=== Available Commands ===")
                print("help      - Show this help message")
                print("show      - Print the current document")
                print("history   - Show recent conversation")
                print("exit/quit - Exit the program\n")
                continue

            if user_input.lower() == 'history':
                print(f"\n{session.get_conversation_summary()}\n")
                continue

            stop_animation = threading.Event()
            loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
            loading_thread.daemon = True
            loading_thread.start()

            try:
                reply = session.send(user_input)
            finally:
                stop_animation.set()
                loading_thread.join()

            print(f"\nAI: {reply.reply_text}\n")
            if reply.has_content_update:
                print("[Document updated. Type 'show' to view it.]\n")

        except KeyboardInterrupt:
            print("\nExiting...")
            break
        except ContentPipelineError as e:
            print(f"\nError: {e.message}")
            continue


def main(argv=None):
    args = parse_args(argv)
    config = Config()
    if not config.validate():
        print("Error initializing client: UPSTAGE_API_KEY is not set")
        return 1

    with SolarClient(config.llm_settings()) as llm_client:
        print(f"Using {config.get_model_info()}")
        orchestrator = PipelineOrchestrator(llm_client, create_search_client(config))

        try:
            project = build_project(args, config)
            final = run_pipeline(orchestrator, project)
        except (ContentPipelineError, OSError) as e:
            print(f"Error: {e}")
            return 1

        session = RefinementSession(
            RefinementChat(llm_client),
            project_title=project.title,
            content_type=project.content_type,
        )
        session.take_final(final)
        chat_loop(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
