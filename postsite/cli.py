from __future__ import annotations

import argparse
import sys
from http.server import ThreadingHTTPServer
from pathlib import Path

from .config import load_config
from .pipeline import BuildError, BuildPipeline, BuildReport
from .server import start_server
from .utils import parse_bool, parse_int
from .watch import WatchError, WatchOrchestrator

DEFAULT_PORT = 3000
PORT_ATTEMPTS = 100


def make_pipeline(args: argparse.Namespace) -> BuildPipeline:
    return BuildPipeline(Path(args.posts), Path(args.output), clean=args.clean)


def build_once(pipeline: BuildPipeline) -> BuildReport:
    print("Generating static files...")
    report = pipeline.run()
    print(f"Build completed in {report.elapsed:.2f}s: {len(report.written)} written, {len(report.failed)} failed.")
    return report


def bind_server(args: argparse.Namespace) -> ThreadingHTTPServer:
    print("Starting server...")
    return start_server(Path(args.output), host=args.host, port=args.port, attempts=args.port_attempts)


def serve(httpd: ThreadingHTTPServer) -> None:
    host, port = httpd.server_address[:2]
    print(f"Serving at http://{host}:{port}/")
    print("Press Ctrl+C to stop")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\nStopping...")
    finally:
        httpd.server_close()


def dev_mode(args: argparse.Namespace) -> None:
    print("Starting development mode...")
    pipeline = make_pipeline(args)
    build_once(pipeline)
    watcher = WatchOrchestrator(Path(args.posts), pipeline.run)
    watcher.start()
    try:
        httpd = bind_server(args)
    except OSError as exc:
        print(f"Error in development mode: {exc}", file=sys.stderr)
        watcher.stop()
        raise
    try:
        serve(httpd)
    finally:
        watcher.stop()


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    parser = argparse.ArgumentParser(description="Markdown posts to static HTML, with a dev server.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--posts", default=cfg_str("posts", "content/posts"), help="Directory containing Markdown posts."
    )
    parser.add_argument("--output", default=cfg_str("output", "public"), help="Output directory for the site.")
    parser.add_argument("--host", default=cfg_str("host", "localhost"), help="Interface for the HTTP server.")
    parser.add_argument(
        "--port", default=cfg_int("port", DEFAULT_PORT), type=int, help="First port to try for the HTTP server."
    )
    parser.add_argument(
        "--port-attempts",
        default=cfg_int("port_attempts", PORT_ATTEMPTS),
        type=int,
        help="How many consecutive ports to try when a port is taken.",
    )
    parser.add_argument(
        "--dev",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("dev", False),
        help="Rebuild on every change under the posts directory while serving.",
    )
    parser.add_argument(
        "--serve",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("serve", True),
        help="Serve the output directory after building.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="site.toml")
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))
    args = build_parser(config, pre_args.config).parse_args(argv)

    try:
        if args.dev:
            dev_mode(args)
            return
        build_once(make_pipeline(args))
        if args.serve:
            serve(bind_server(args))
    except (BuildError, WatchError, OSError) as exc:
        print(f"Error starting application: {exc}", file=sys.stderr)
        sys.exit(1)
