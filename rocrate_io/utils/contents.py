#!/usr/bin/env python
# -*- coding: utf-8 -*-

# SPDX-License-Identifier: Apache-2.0
# Copyright 2020-2024 Barcelona Supercomputing Center (BSC), Spain
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import absolute_import

import logging
import os
import pathlib
import shutil
import urllib.parse

from typing import (
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    import zipfile

    from typing import (
        Optional,
    )

from .misc import is_uri

logger = logging.getLogger(__name__)


def id2relpath(entity_id: "str") -> "Optional[pathlib.PurePosixPath]":
    """
    Translates the identifier of a data entity into a path relative
    to the crate root. Absolute URIs, fragments and identifiers
    escaping the crate root have no path.
    """
    if entity_id.startswith("#") or is_uri(entity_id):
        return None

    rel_path = pathlib.PurePosixPath(urllib.parse.unquote(entity_id))
    if rel_path.is_absolute() or ".." in rel_path.parts:
        return None

    # "./" and similar ones are the crate root itself
    if len(rel_path.parts) == 0:
        return None

    return rel_path


def resolve_in_crate(
    root: "pathlib.Path", entity_id: "str"
) -> "Optional[pathlib.Path]":
    """
    It returns the path of the content described by the identifier,
    when it exists within the crate root.
    """
    rel_path = id2relpath(entity_id)
    if rel_path is None:
        return None

    the_path = root.joinpath(*rel_path.parts)
    if not the_path.exists():
        return None

    return the_path


def copytree_pathlib(
    src: "pathlib.Path",
    dest: "pathlib.Path",
    preserve_attrs: "bool" = True,
) -> None:
    assert src.is_dir()
    dest.mkdir(parents=True, exist_ok=True)

    for entry in os.scandir(src):
        if entry.is_dir(follow_symlinks=False):
            copytree_pathlib(
                src / entry.name,
                dest / entry.name,
                preserve_attrs=preserve_attrs,
            )
        else:
            copy_pathlib(
                src / entry.name,
                dest / entry.name,
                preserve_attrs=preserve_attrs,
            )

    # Last, but not the least important
    if preserve_attrs:
        shutil.copystat(src, dest)


def copy_pathlib(
    src: "pathlib.Path",
    dest: "pathlib.Path",
    preserve_attrs: "bool" = True,
) -> None:
    """
    Copies either a file or a directory, creating the
    missing parent directories of the destination
    """
    assert src.exists(), f"File {src.as_posix()} must exist to be copied"

    # Avoid losing everything by overwriting itself
    if dest.exists() and src.resolve() == dest.resolve():
        logger.debug(f"Skipping copy of {src.as_posix()} over itself")
        return

    if not dest.parent.is_dir():
        dest.parent.mkdir(parents=True)

    if src.is_dir():
        copytree_pathlib(src, dest, preserve_attrs=preserve_attrs)
    elif preserve_attrs:
        shutil.copy2(src, dest)
    else:
        shutil.copy(src, dest)


def add_to_zip(zf: "zipfile.ZipFile", src: "pathlib.Path", arcname: "str") -> None:
    """
    Adds either a file or a whole directory tree to an archive
    """
    if src.is_dir():
        zf.write(src, arcname=arcname.rstrip("/") + "/")
        for entry in sorted(src.iterdir()):
            add_to_zip(zf, entry, arcname.rstrip("/") + "/" + entry.name)
    else:
        zf.write(src, arcname=arcname)
