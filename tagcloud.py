"""CLI entrypoint for generating a tag cloud HTML file from a text document."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from tagcloud_core import (
    DEFAULT_SEPARATORS,
    DEFAULT_TOP_N,
    MAX_SIZE,
    MIN_SIZE,
    MODES,
    TagCloudConfig,
    cloud_to_records,
    default_title,
    generate_tag_cloud_from_file,
    render_to_path,
)
from tagcloud_errors import TagCloudError

logger = logging.getLogger("tagcloud.cli")

Prompt = Callable[[str], str]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a tag cloud HTML page from a text file.")
    parser.add_argument("input_path", nargs="?", default=None, help="Path to the input text file.")
    parser.add_argument("html_path", nargs="?", default=None, help="Destination HTML file path.")
    parser.add_argument("-n", "--top", type=int, default=None, help="Number of most frequent words to show.")
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="cloud",
        help="Render a sized tag cloud, or a table of every word and its count.",
    )
    parser.add_argument("--min-size", type=int, default=MIN_SIZE, help="Font size of the least frequent word.")
    parser.add_argument("--max-size", type=int, default=MAX_SIZE, help="Font size of the most frequent word.")
    parser.add_argument(
        "--separators",
        type=str,
        default=DEFAULT_SEPARATORS,
        help="Characters that separate words.",
    )
    parser.add_argument("--stylesheet", type=str, default=None, help="Optional stylesheet URL linked from the page.")
    parser.add_argument("--title", type=str, default=None, help="HTML document title and heading.")
    parser.add_argument("--encoding", type=str, default="utf-8", help="Encoding of the input file.")
    parser.add_argument(
        "--dump-json",
        type=Path,
        default=None,
        help="Optional path to dump the rendered word list as JSON alongside the HTML output.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details.")
    return parser.parse_args(argv)


def ask(prompt: Prompt, message: str) -> str:
    try:
        return prompt(message).strip()
    except EOFError:
        raise SystemExit(f"Input closed while waiting for: {message.strip()}") from None


def prompt_for(value: Optional[str], message: str, prompt: Prompt) -> str:
    if value:
        return value
    answer = ask(prompt, message)
    if not answer:
        raise SystemExit(f"No value given for: {message.strip()}")
    return answer


def prompt_for_top(value: Optional[int], prompt: Prompt) -> int:
    if value is not None:
        return value
    raw = ask(prompt, "How many words in output file: ")
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"Number of words must be an integer, got {raw!r}") from None


def main(argv: Optional[Sequence[str]] = None, prompt: Prompt = input) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.mode == "table" and args.top is not None:
        raise SystemExit("--top is only used in cloud mode; table mode lists every word")

    input_path = Path(prompt_for(args.input_path, "Enter name of input file: ", prompt))
    top_n = prompt_for_top(args.top, prompt) if args.mode == "cloud" else DEFAULT_TOP_N

    config = TagCloudConfig(
        separators=args.separators,
        top_n=top_n,
        min_size=args.min_size,
        max_size=args.max_size,
        mode=args.mode,
        stylesheet=args.stylesheet,
        title=args.title,
        encoding=args.encoding,
    )

    try:
        config.validate()
        if not input_path.exists():
            raise SystemExit(f"Input file not found: {input_path}")
        cloud = generate_tag_cloud_from_file(input_path, config=config)
    except (TagCloudError, OSError) as exc:
        raise SystemExit(str(exc)) from exc

    html_path = Path(prompt_for(args.html_path, "Enter name of output file: ", prompt))
    html_path.parent.mkdir(parents=True, exist_ok=True)
    title = default_title(input_path, config)

    try:
        render_to_path(html_path, cloud, title=title, config=config)
    except (TagCloudError, OSError) as exc:
        raise SystemExit(f"Failed writing {html_path}: {exc}") from exc
    logger.info("%d tokens, %d distinct, %d rendered", cloud.total_tokens, cloud.unique_tokens, len(cloud.words))
    print(html_path)

    if args.dump_json:
        args.dump_json.parent.mkdir(parents=True, exist_ok=True)
        args.dump_json.write_text(json.dumps(cloud_to_records(cloud), indent=2), encoding="utf-8")


if __name__ == "__main__":
    main()
