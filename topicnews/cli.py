"""
Command-line interface for topicnews.
"""
import sys
import argparse
import logging
import asyncio
from typing import List, Optional
from dotenv import load_dotenv

from topicnews.config import Config
from topicnews.core.app import NewsApp
from topicnews.formatters.html import HtmlConverter
from topicnews.formatters.markdown import MarkdownFormatter

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

HELP_TEXT = """Type a topic to add it, "-topic" to remove it.
Commands: :list  :help  :quit"""

def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Follow news topics and read matching articles")
    parser.add_argument("--config", help="Path to YAML or JSON config file")
    parser.add_argument("--storage", help="Path to the preferences database")
    parser.add_argument("--api-key", help="NewsAPI key (defaults to NEWSAPI_KEY)")
    parser.add_argument("--add", action="append", default=[], metavar="TOPIC", help="Add a topic")
    parser.add_argument("--remove", action="append", default=[], metavar="TOPIC", help="Remove a topic")
    parser.add_argument("--list", action="store_true", help="Print topics only, without fetching")
    parser.add_argument("--markdown", metavar="FILE", help="Also write the page as Markdown")
    parser.add_argument("--html", metavar="FILE", help="Also write the page as HTML")
    parser.add_argument("--interactive", "-i", action="store_true", help="Run an interactive prompt")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)

def build_config(args) -> Config:
    """
    Load configuration and apply command-line overrides.
    """
    cfg = Config(args.config)
    if args.storage:
        cfg.set('storage.path', args.storage)
    if args.api_key:
        cfg.set('newsapi.api_key', args.api_key)
    return cfg

class PageRenderer:
    """
    Renders the app state to stdout and optional output files.
    """
    def __init__(self, app: NewsApp, title: str, markdown_path: str = None, html_path: str = None):
        self.app = app
        self.title = title
        self.markdown_path = markdown_path
        self.html_path = html_path
        self.formatter = MarkdownFormatter()

    def render(self) -> str:
        page = self.formatter.format_page(self.title, self.app.preferences, self.app.articles)
        print(page)

        if self.markdown_path:
            try:
                with open(self.markdown_path, "w", encoding="utf-8") as f:
                    f.write(page)
                logger.info(f"Wrote {self.markdown_path}")
            except OSError as e:
                logger.error(f"Error writing {self.markdown_path}: {e}")

        if self.html_path:
            HtmlConverter().write(page, self.html_path, title=self.title)

        return page

async def apply_mutations(app: NewsApp, add: List[str], remove: List[str]) -> None:
    for topic in add:
        if not await app.add_topic(topic):
            logger.warning(f"Ignoring blank topic {topic!r}")
    for topic in remove:
        await app.remove_topic(topic)

async def read_line(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, prompt)

async def interactive_loop(app: NewsApp, renderer: PageRenderer, placeholder: str) -> None:
    """
    Prompt loop standing in for the mobile screen.

    Each entry is handled like a tap: a plain line adds a topic, a line
    starting with "-" removes one. The page is re-rendered once the
    refetch triggered by the change has settled.
    """
    print(HELP_TEXT)
    renderer.render()

    while True:
        try:
            line = await read_line(f"{placeholder} > ")
        except EOFError:
            break

        entry = line.strip()
        if entry in (":quit", ":q"):
            break
        if entry == ":help":
            print(HELP_TEXT)
            continue
        if entry == ":list":
            renderer.render()
            continue

        if entry.startswith("-"):
            await app.remove_topic(entry[1:].strip())
        elif not await app.add_topic(entry):
            continue

        await app.settle()
        renderer.render()

async def async_main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)

    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT
    )

    cfg = build_config(args)
    app = NewsApp.from_config(cfg)
    renderer = PageRenderer(
        app,
        title=cfg.get('display.title', 'topicnews'),
        markdown_path=args.markdown,
        html_path=args.html,
    )

    try:
        if args.add or args.remove:
            # Apply command-line edits as one batch and fetch once afterwards
            await app.store.load()
            app.detach()
            await apply_mutations(app, args.add, args.remove)
            app.attach()
            if not args.list:
                await app.refresh()
        elif not args.list:
            await app.start()
        else:
            await app.store.load()

        if args.list:
            print(renderer.formatter.format_preferences(app.preferences))
        elif args.interactive:
            await interactive_loop(app, renderer, cfg.get('display.placeholder', 'Add topic'))
        else:
            renderer.render()
    finally:
        await app.close()

    return 0

def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        return 1

if __name__ == "__main__":
    sys.exit(main())
