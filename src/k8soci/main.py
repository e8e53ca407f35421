import typer
from k8soci.commands import config, git, images
from k8soci.logging import setup_logging, get_logger

app = typer.Typer(
    help="[bold blue]k8soci[/bold blue] - Credential resolution for Git remotes "
    "and Kubernetes image pulls",
    rich_markup_mode="rich",
)

app.add_typer(config.app, name="config")

app.command("decode-secret")(images.decode_secret)
app.command("resolve-image")(images.resolve_image)
app.command("image-credentials")(images.image_credentials)
app.command("git-auth")(git.git_auth)


def main():
    setup_logging()
    logger = get_logger("k8soci.main")
    logger.debug("k8soci CLI started")

    try:
        app()
    except Exception as e:
        logger.error(f"Unhandled exception in main: {str(e)}")
        raise
    finally:
        logger.debug("k8soci CLI finished")


if __name__ == "__main__":
    main()
