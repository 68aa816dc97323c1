from __future__ import annotations

"""Top-level CLI for rendering, converting and building problem details."""

import click

from webProblem import __version__
from webProblem.classify import title_from_name
from webProblem.detail import ProblemDetail, ProblemDetailFormatError
from webProblem.status import to_status_type
from webProblem.xml_codec import from_xml, to_xml

_FORMATS = ("text", "json", "xml")


def _parse(text: str) -> ProblemDetail:
    if text.lstrip().startswith("<"):
        return from_xml(text)
    return ProblemDetail.from_json(text)


def _format(detail: ProblemDetail, fmt: str) -> str:
    if fmt == "json":
        return detail.to_json()
    if fmt == "xml":
        return to_xml(detail).rstrip("\n")
    return detail.render().rstrip("\n")


@click.group()
@click.version_option(__version__)
def cli() -> None:  # pragma: no cover - simple wrapper
    """webProblem command line."""


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(_FORMATS),
    default="text",
    show_default=True,
    help="Output format.",
)
def render(source, fmt: str) -> None:
    """Parse a JSON or XML problem detail and print it."""

    try:
        detail = _parse(source.read())
    except ProblemDetailFormatError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(_format(detail, fmt))


@cli.command()
@click.argument("name")
def title(name: str) -> None:
    """Print the default title derived from an error type NAME."""

    click.echo(title_from_name(name))


@cli.command()
@click.option("--status", type=int, default=None, help="HTTP status code.")
@click.option("--type", "type_", default=None, help="Problem type URI.")
@click.option("--title", "title_", default=None, help="Short summary of the problem type.")
@click.option("--detail", default=None, help="Explanation of this occurrence.")
@click.option("--instance", default=None, help="URI of this occurrence.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(_FORMATS),
    default="json",
    show_default=True,
    help="Output format.",
)
def new(
    status: int | None,
    type_: str | None,
    title_: str | None,
    detail: str | None,
    instance: str | None,
    fmt: str,
) -> None:
    """Build a problem detail from the given fields and print it."""

    if status is not None:
        try:
            to_status_type(status)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--status") from exc
    problem = ProblemDetail(
        type=type_,
        title=title_,
        status=status,
        detail=detail,
        instance=instance,
    )
    click.echo(_format(problem, fmt))


def main() -> None:  # pragma: no cover - console script entry
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
