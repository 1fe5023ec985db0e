"""Logic for resolving key-paths (Type or Type.member) to page links."""

from apidoc.api_path_for_type import api_path_for_type
from apidoc.link_target import LinkTarget
from apidoc.metadata_store import MetadataStore, TypeMetadata

MEMBER_LOOKUP_KINDS = ("properties", "methods", "events", "constants")


class LinkResolver:
    """Resolves key-paths against the types held by a MetadataStore."""

    def __init__(self, store: MetadataStore) -> None:
        """Initialize the resolver on top of a metadata store."""
        self.store = store

    def resolve_link(
        self, key_path: str, base: str = "/", version: str | None = None
    ) -> LinkTarget | None:
        """Resolve a key-path to a LinkTarget, or None if nothing matches.

        A key-path may be qualified with a declared version ("7.5.0/Foo.bar"),
        which takes precedence over `version`. A None version looks the
        reference up in the default version and leaves the path unversioned.
        """
        key_path = key_path.strip()
        version_prefix, sep, rest = key_path.partition("/")
        if sep and self.store.has_version(version_prefix):
            key_path = rest
            version = version_prefix
        if not key_path:
            return None

        lookup_version = version or self.store.default_version
        path_version = None if lookup_version == self.store.default_version else version

        metadata = self.store.find_metadata(key_path, lookup_version)
        if metadata:
            return LinkTarget(
                name=key_path,
                path=api_path_for_type(base, key_path, path_version),
            )

        type_name, dot, member_name = key_path.rpartition(".")
        if not dot or not type_name or not member_name:
            return None
        metadata = self.store.find_metadata(type_name, lookup_version)
        if not metadata:
            return None
        member = _find_member(metadata, member_name)
        if member is None:
            return None

        # Inherited members are documented on the declaring type's page
        owner = type_name
        inherits = member.get("inherits")
        if inherits and inherits != type_name:
            if self.store.find_metadata(inherits, lookup_version):
                owner = inherits

        page = api_path_for_type(base, owner, path_version)
        return LinkTarget(name=key_path, path=f"{page}#{member_name.lower()}")


def _find_member(metadata: TypeMetadata, member_name: str) -> TypeMetadata | None:
    """Find a member by name across all member kinds of a type."""
    for kind in MEMBER_LOOKUP_KINDS:
        for member in metadata.get(kind) or []:
            if isinstance(member, dict) and member.get("name") == member_name:
                return member
    return None
