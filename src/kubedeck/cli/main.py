"""Main CLI entry point using Typer."""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console

from kubedeck import __version__
from kubedeck.logging.config import configure_logging
from kubedeck.session.types import ResourceType

app = typer.Typer(
    name="kubedeck",
    help="Interactive terminal session for Kubernetes pods, PVCs and StatefulSets.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"kubedeck version {__version__}")
        raise typer.Exit()


def parse_resource_type(value: str) -> ResourceType:
    """Accept a kind, label or plural (``pod``, ``PVCs``, ``StatefulSets``)."""
    wanted = value.strip().lower()
    aliases = {"pvc": "PVCs", "sts": "StatefulSets"}
    try:
        return ResourceType.from_kind(aliases.get(wanted, value))
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def main(
    context: str | None = typer.Option(
        None,
        "--context",
        "-c",
        help="Kubeconfig context to start in (default: current context).",
    ),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace to start in, or 'all'.",
    ),
    resource_type: str = typer.Option(
        "pods",
        "--type",
        "-t",
        help="Resource type to start with: pods, pvcs or statefulsets.",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging to the log file.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging to the log file.",
    ),
) -> None:
    """Browse and operate on a Kubernetes cluster from the terminal."""
    initial_type = parse_resource_type(resource_type)

    # The session owns the terminal; logs go to the rotating file only
    configure_logging(verbose=verbose, debug=debug, console=False)

    from kubedeck.core.config import SessionConfig
    from kubedeck.integrations.kubernetes.client import KubernetesClient
    from kubedeck.integrations.kubernetes.config import KubernetesConfig
    from kubedeck.services.kubernetes.cluster_client import KubernetesClusterClient
    from kubedeck.tui.apps.kubernetes import KubedeckApp

    try:
        k8s_config = KubernetesConfig.from_env()
        session_config = SessionConfig.from_env()
    except ValidationError as e:
        err_console.print(f"[red]Invalid configuration:[/red]\n{e}")
        raise typer.Exit(1) from None

    with KubernetesClient(k8s_config) as client:
        kubedeck_app = KubedeckApp(
            KubernetesClusterClient(client),
            session_config,
            context=context or k8s_config.context,
            namespace=namespace or k8s_config.namespace,
            resource_type=initial_type,
        )
        kubedeck_app.run()


if __name__ == "__main__":
    app()
