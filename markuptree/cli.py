from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import load_config, tree_options
from .errors import MarkupTreeError
from .render import highlight_css, markdown_parser, module_template, read_template
from .tree import MARKUP_EXTENSIONS, OUT_EXTENSIONS, MarkupTree
from .utils import parse_bool, parse_int

DATE_FMT = "%Y-%m-%d %H:%M"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def make_tree(args: argparse.Namespace) -> MarkupTree:
    parser = markdown_parser(highlight=args.highlight, img_root=args.img_root)
    return MarkupTree(
        args.source,
        parser,
        filter_extension=args.filter_extension,
        out_extension=args.out_extension,
        out_dir=args.out_dir,
        posts_dir=args.posts_dir,
        api_root=args.api_root,
        workers=args.build_workers,
    )


def run_build(args: argparse.Namespace) -> None:
    tree = make_tree(args)
    if args.template:
        template = read_template(Path(args.template))
    elif args.mode == "files":
        template = module_template
    else:
        template = None
    written = tree.write(args.mode, template, dispatch=args.dispatch)
    if args.css_file:
        css_path = Path(args.css_file)
        css_path.parent.mkdir(parents=True, exist_ok=True)
        css_path.write_text(highlight_css(args.css_style), encoding="utf-8")
    print(f"Wrote {len(written)} file(s) under {Path(args.out_dir) / args.posts_dir}")


def run_api(args: argparse.Namespace) -> None:
    entries = [entry.to_dict() for entry in make_tree(args).api_tree()]
    text = json.dumps(entries, indent=2, ensure_ascii=False, default=str)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        print(f"API index written to: {output}", file=sys.stderr)
    else:
        print(text)


def run_list(args: argparse.Namespace) -> None:
    tree = make_tree(args)
    for record in tree.tree():
        created = record.file_stat.created.strftime(DATE_FMT)
        print(f"{created}  {record.slug}  {record.source_path.relative_to(tree.root).as_posix()}")


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    options = tree_options(config)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=config_path, help="Path to config file (TOML/YAML/JSON).")
    common.add_argument("--source", default=cfg_str("source", "posts"), help="Directory containing markup documents.")
    common.add_argument(
        "--filter-extension",
        default=options.get("filter_extension", ".md"),
        choices=MARKUP_EXTENSIONS,
        help="Extension of the source documents to include.",
    )
    common.add_argument(
        "--out-extension",
        default=options.get("out_extension", ".js"),
        choices=OUT_EXTENSIONS,
        help="Extension used for files-mode output.",
    )
    common.add_argument("--out-dir", default=options.get("out_dir", "."), help="Root output directory.")
    common.add_argument("--posts-dir", default=options.get("posts_dir", "."), help="Subdirectory under --out-dir.")
    common.add_argument("--api-root", default=options.get("api_root", "/posts"), help="Prefix for API routes.")
    common.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for reading/writing (0 = auto).",
    )
    common.add_argument(
        "--highlight",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("highlight", True),
        help="Highlight fenced code blocks with pygments.",
    )
    common.add_argument(
        "--img-root",
        default=cfg_str("img_root", ""),
        help="Prefix for relative image sources in rendered HTML.",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Verbose logging.")

    parser = argparse.ArgumentParser(
        prog="markuptree",
        description="Turn a directory of markup documents into API, HTML and file layouts.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    build = commands.add_parser("build", parents=[common], help="Render documents to disk.")
    build.add_argument(
        "--mode",
        default=cfg_str("mode", "html"),
        choices=("html", "files"),
        help="Output layout: <slug>/index.html or <slug><out-extension>.",
    )
    build.add_argument(
        "--template",
        default=cfg_str("template", ""),
        help="Page template with {{content}}, {{title}} and metadata placeholders.",
    )
    build.add_argument(
        "--dispatch",
        default=cfg_str("dispatch", "concurrent"),
        choices=("concurrent", "sequential"),
        help="Write records on the worker pool or one after another.",
    )
    build.add_argument("--css-file", default=cfg_str("css_file", ""), help="Write the pygments stylesheet here.")
    build.add_argument("--css-style", default=cfg_str("css_style", "default"), help="Pygments style name.")
    build.set_defaults(handler=run_build)

    api = commands.add_parser("api", parents=[common], help="Print the API view as JSON.")
    api.add_argument("--output", default="", help="Write the JSON to this file instead of stdout.")
    api.set_defaults(handler=run_api)

    listing = commands.add_parser("list", parents=[common], help="List documents, newest first.")
    listing.set_defaults(handler=run_list)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="markuptree.toml")
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_config(Path(pre_args.config))
    except MarkupTreeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(config, pre_args.config).parse_args(argv)
    _setup_logging(args.verbose)
    start = time.perf_counter()
    try:
        args.handler(args)
    except (MarkupTreeError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    if args.command == "build":
        print(f"Build completed in {elapsed:.2f}s.")


if __name__ == "__main__":
    main()
