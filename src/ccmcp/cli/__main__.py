from ccmcp.cli.main import app


def main():
    """Main entry point for the ccmcp command."""
    app()


if __name__ == "__main__":
    main()
