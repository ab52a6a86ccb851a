from .cli import app


def main() -> None:
    app(prog_name="finval")


if __name__ == "__main__":
    main()
