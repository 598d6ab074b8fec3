"""Link-or-copy materialization of a single subtitle destination."""

from __future__ import annotations

import logging
import os
import shutil

from .errors import CopyError, LinkError
from .logging_utils import render_fields_block
from .models import MaterializeOutcome

LOGGER = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".subsorter-partial"


def destination_exists(destination: str) -> bool:
    # lexists: a dangling symlink still counts as already reconciled
    return os.path.lexists(destination)


def _partial_path(destination: str) -> str:
    directory, name = os.path.split(destination)
    return os.path.join(directory, f".{name}{PARTIAL_SUFFIX}")


def _place_exclusive(partial: str, destination: str) -> None:
    try:
        os.link(partial, destination)
    except FileExistsError:
        raise
    except OSError:
        # no hard links on this filesystem; create the destination exclusively instead
        with open(partial, "rb") as reader, open(destination, "xb") as writer:
            try:
                shutil.copyfileobj(reader, writer)
            except Exception:
                writer.close()
                os.unlink(destination)
                raise
        shutil.copystat(partial, destination)


def copy_file(source: str, destination: str) -> None:
    """Copy ``source`` to ``destination`` through a temporary sibling.

    The temporary file is removed afterwards, so ``destination`` either holds
    the whole file or does not exist. An existing ``destination`` is never
    replaced; ``FileExistsError`` is raised instead.
    """
    partial = _partial_path(destination)
    try:
        shutil.copy2(source, partial)
        _place_exclusive(partial, destination)
    finally:
        try:
            os.unlink(partial)
        except FileNotFoundError:
            pass


def materialize(source: str, destination: str) -> MaterializeOutcome:
    """Create ``destination`` as a symlink to ``source``, falling back to a copy.

    Returns:
        ``Skipped`` when the destination already exists, ``Linked`` or
        ``Copied`` on success, ``Failed`` with a LinkError or CopyError
        otherwise. Nothing is raised.
    """
    if destination_exists(destination):
        LOGGER.debug("Subtitle destination already exists: %s", destination)
        return MaterializeOutcome.skipped()

    try:
        os.symlink(source, destination)
    except FileExistsError:
        LOGGER.debug("Subtitle destination appeared before linking: %s", destination)
        return MaterializeOutcome.skipped()
    except OSError as link_exc:
        try:
            copy_file(source, destination)
        except FileExistsError:
            LOGGER.debug("Subtitle destination appeared before copying: %s", destination)
            return MaterializeOutcome.skipped()
        except Exception as copy_exc:  # noqa: BLE001
            error = CopyError(
                f"Copy fallback failed for {source}: {copy_exc}",
                source,
                cause=copy_exc,
                link_error=link_exc,
            )
            LOGGER.error(
                render_fields_block(
                    "Subtitle Copy Failed",
                    {
                        "Source": source,
                        "Destination": destination,
                        "Link Error": str(link_exc),
                        "Copy Error": str(copy_exc),
                    },
                    pad_top=True,
                )
            )
            return MaterializeOutcome.failed(error)
        LOGGER.info(
            render_fields_block(
                "Subtitle Copied",
                {
                    "Source": source,
                    "Destination": destination,
                    "Link Error": str(link_exc),
                },
                pad_top=True,
            )
        )
        return MaterializeOutcome.copied()
    except Exception as exc:  # noqa: BLE001
        error = LinkError(f"Symbolic link failed for {source}: {exc}", source, cause=exc)
        LOGGER.error(
            render_fields_block(
                "Subtitle Link Failed",
                {
                    "Source": source,
                    "Destination": destination,
                    "Error": str(exc),
                },
                pad_top=True,
            )
        )
        return MaterializeOutcome.failed(error)

    LOGGER.info(
        render_fields_block(
            "Subtitle Linked",
            {
                "Source": source,
                "Destination": destination,
            },
            pad_top=True,
        )
    )
    return MaterializeOutcome.linked()
