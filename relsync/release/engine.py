"""Release reconciliation: create the release if it is missing, update it otherwise.

The only retried path is create-after-not-found. A failed create is taken as
a race with a concurrent run that created the same tag between lookup and
create, so the whole lookup is repeated until ``max_attempts`` is spent.
"""

from __future__ import annotations

from relsync.core.result import Err, Ok, Result
from relsync.output.console import ConsoleProtocol
from relsync.release.backend import ReleaseBackend
from relsync.release.errors import ReleaseError
from relsync.release.model import DesiredRelease, ReleaseFields, RemoteRelease

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "reconcile",
    "find_release",
    "find_draft_release",
    "merge_body",
    "update_fields",
    "create_fields",
]

DEFAULT_MAX_ATTEMPTS = 3


def merge_body(*, existing: str | None, new: str | None, append: bool) -> str:
    """Combine an existing release body with newly supplied text.

    With ``append`` and both sides non-empty the result is
    ``existing + "\\n" + new``. Otherwise the new text wins and the existing
    body is kept when no new text was given.

    Appending is not idempotent: reconciling twice with the same new text
    appends it twice.
    """
    new_text = new or ""
    existing_text = existing or ""
    if append and new_text and existing_text:
        return f"{existing_text}\n{new_text}"
    return new_text or existing_text


def update_fields(desired: DesiredRelease, existing: RemoteRelease) -> ReleaseFields:
    """Fields for updating ``existing`` towards ``desired``."""
    if desired.target_commitish and desired.target_commitish != existing.target_commitish:
        target_commitish = desired.target_commitish
    else:
        target_commitish = existing.target_commitish

    return ReleaseFields(
        tag_name=desired.tag,
        name=desired.name or existing.name or desired.tag,
        body=merge_body(existing=existing.body, new=desired.body, append=desired.append_body),
        draft=existing.draft if desired.draft is None else desired.draft,
        prerelease=existing.prerelease if desired.prerelease is None else desired.prerelease,
        target_commitish=target_commitish,
        discussion_category_name=desired.discussion_category_name,
        generate_release_notes=desired.generate_release_notes,
    )


def create_fields(desired: DesiredRelease) -> ReleaseFields:
    """Fields for a brand new release; nothing is inherited."""
    return ReleaseFields(
        tag_name=desired.tag,
        name=desired.name or desired.tag,
        body=desired.body,
        draft=desired.draft,
        prerelease=desired.prerelease,
        target_commitish=desired.target_commitish,
        discussion_category_name=desired.discussion_category_name,
        generate_release_notes=desired.generate_release_notes,
    )


def find_draft_release(backend: ReleaseBackend, owner: str, repo: str, tag: str) -> Result[RemoteRelease, ReleaseError]:
    """Scan every release page for ``tag``.

    Drafts are not indexed by tag, so this is a linear scan. It stops at the
    first page containing a match; later pages are never requested.
    """
    for page in backend.list_releases(owner, repo):
        if isinstance(page, Err):
            return page
        for release in page.value:
            if release.tag_name == tag:
                return Ok(release)
    return Err(ReleaseError(kind="not_found", message=f"no release found for tag '{tag}'"))


def find_release(backend: ReleaseBackend, desired: DesiredRelease) -> Result[RemoteRelease, ReleaseError]:
    if desired.draft:
        return find_draft_release(backend, desired.owner, desired.repo, desired.tag)
    return backend.get_release_by_tag(desired.owner, desired.repo, desired.tag)


def reconcile(
    desired: DesiredRelease,
    backend: ReleaseBackend,
    console: ConsoleProtocol,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Result[RemoteRelease, ReleaseError]:
    """Converge the remote release for ``desired.tag`` onto ``desired``.

    Args:
        desired: Target state; ``desired.tag`` must already be resolved.
        backend: Provider implementation.
        console: Progress output.
        max_attempts: Lookup/create rounds allowed before giving up.

    Returns:
        Ok with the created or updated release. Err with the lookup or
        update error unchanged when one occurs, or ``aborted_after_retries``
        once every create attempt failed.
    """
    attempts_left = max_attempts
    while attempts_left > 0:
        found = find_release(backend, desired)

        if isinstance(found, Ok):
            existing = found.value
            if desired.target_commitish and desired.target_commitish != existing.target_commitish:
                console.info(
                    f'Updating commit from "{existing.target_commitish}" to "{desired.target_commitish}"'
                )
            return backend.update_release(
                desired.owner, desired.repo, existing.id, update_fields(desired, existing)
            )

        if not found.error.is_not_found:
            console.warning(f"Unexpected error fetching release for tag {desired.tag}: {found.error.pretty()}")
            return found

        using_commit = f' using commit "{desired.target_commitish}"' if desired.target_commitish else ""
        console.info(f"Creating new release for tag {desired.tag}{using_commit}...")
        created = backend.create_release(desired.owner, desired.repo, create_fields(desired))
        if isinstance(created, Ok):
            return created

        attempts_left -= 1
        console.warning(
            f"Release creation failed: {created.error.pretty()}\n"
            f"retrying... ({attempts_left} retries remaining)"
        )

    console.error("Too many retries. Aborting...")
    return Err(
        ReleaseError(
            kind="aborted_after_retries",
            message=f"gave up on release for tag '{desired.tag}' after {max_attempts} attempts",
        )
    )
