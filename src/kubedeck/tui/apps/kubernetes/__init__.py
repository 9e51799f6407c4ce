"""Kubernetes session TUI application.

Usage:
    from kubedeck.tui.apps.kubernetes import KubedeckApp

    app = KubedeckApp(client=cluster_client, config=SessionConfig())
    app.run()
"""

from kubedeck.tui.apps.kubernetes.app import KubedeckApp

__all__ = ["KubedeckApp"]
