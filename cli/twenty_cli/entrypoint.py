from __future__ import annotations


def main() -> None:
    from .main import app

    try:
        app()
    except KeyboardInterrupt:
        raise SystemExit(130)


if __name__ == "__main__":
    main()
