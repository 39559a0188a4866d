"""Entry point: serve | search."""

import sys


def _pop_option(args: list[str], name: str, default: str) -> tuple[str, list[str]]:
    if name in args:
        idx = args.index(name)
        if idx + 1 < len(args):
            return args[idx + 1], args[:idx] + args[idx + 2:]
        return default, args[:idx]
    return default, args


def main():
    mode = "serve"
    if len(sys.argv) > 1:
        mode = sys.argv[1].lower()

    if mode == "serve":
        import uvicorn

        from src.api.app import create_app
        from src.core.config import config

        uvicorn.run(create_app(config), host=config.http_host, port=config.http_port)

    elif mode == "search":
        from src.interfaces.oneshot import main as run_oneshot_main

        search_mode, query_parts = _pop_option(sys.argv[2:], "--mode", "web")
        if query_parts:
            query = " ".join(query_parts).strip()
        else:
            query = sys.stdin.read().strip()
        sys.exit(run_oneshot_main(query=query, mode=search_mode))

    else:
        print(f"Unknown mode: {mode}")
        print("Usage: python -m src.main [serve|search [--mode web|news|trending|images] <query>]")
        sys.exit(1)


if __name__ == "__main__":
    main()
