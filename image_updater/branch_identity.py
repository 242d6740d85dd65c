import hashlib
import json
import re

BRANCH_PREFIX = "automated/update-image"
DIGEST_LENGTH = 8

_UNSAFE_REF_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_DOT_RUNS = re.compile(r"\.{2,}")


def _sanitize(component: str) -> str:
    # git refs can't hold whitespace, ~^:?*[\ or "..", nor start with "-" or "."
    safe = _UNSAFE_REF_CHARS.sub("-", component)
    safe = _DOT_RUNS.sub(".", safe)
    return safe.strip(".-") or "x"


def coordinate_digest(
    tenant: str, application: str, environment: str, service: str
) -> str:
    m = hashlib.sha256()
    m.update(json.dumps([tenant, application, environment, service]).encode("utf-8"))
    return m.hexdigest()[:DIGEST_LENGTH]


def derive_branch_name(
    tenant: str, application: str, environment: str, service: str
) -> str:
    """
    The branch name is the idempotency key of a coordinate: re-running an
    update for the same coordinate lands on the same branch (and PR), whatever
    the image or the reviewers are.

    The readable part is sanitized for git, so two coordinates may render the
    same; the digest over the raw coordinate keeps them apart.
    """
    readable = "-".join(
        _sanitize(c) for c in (tenant, application, environment, service)
    )
    digest = coordinate_digest(tenant, application, environment, service)
    return f"{BRANCH_PREFIX}-{readable}-{digest}"
