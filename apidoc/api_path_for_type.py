"""Utility for determining the site path of a type page."""


def api_path_for_type(base: str, type_name: str, version: str | None = None) -> str:
    """Generate the page path for a type name.

    Titanium.UI.Window -> <base>[<version>/]api/Titanium/UI/Window.html
    """
    if not base.endswith("/"):
        base += "/"
    prefix = f"{version}/" if version else ""
    return f"{base}{prefix}api/{type_name.replace('.', '/')}.html"
