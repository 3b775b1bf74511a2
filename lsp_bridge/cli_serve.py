import argparse
import os

import uvicorn


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lsp-bridge-serve",
        description="Serve the code-intelligence tools over HTTP.",
    )
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("RELOAD", "0") in {"1", "true", "True"},
        help="Reload on code changes (development only)",
    )
    args = parser.parse_args(argv)
    # The language server starts lazily on the first tool call
    uvicorn.run("lsp_bridge.main:app", host=args.host, port=args.port, reload=args.reload)  # type: ignore[arg-type]
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
