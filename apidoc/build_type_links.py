"""Logic for building the name -> page path table used by client-side links."""

from apidoc.link_resolver import LinkResolver
from apidoc.metadata_store import MetadataStore


def build_type_links(store: MetadataStore, resolver: LinkResolver) -> dict[str, str]:
    """Map every type name across all versions to its unversioned page path.

    The first version declaring a name wins.
    """
    type_links: dict[str, str] = {}
    for version in store.versions:
        for name in store.type_names(version):
            if name in type_links:
                continue
            # Names only declared in older versions are not found in the default
            link = resolver.resolve_link(name, "/") or resolver.resolve_link(
                name, "/", version
            )
            if link:
                type_links[name] = link.path
    return type_links
