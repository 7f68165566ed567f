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

import argparse
import logging
import os
import pathlib
import sys
from typing import (
    cast,
    TYPE_CHECKING,
)

from .common import (
    AbstractROCrateIOException,
    ArgsDefaultWithRawHelpFormatter,
    StrDocEnum,
)

if TYPE_CHECKING:
    from typing import (
        Any,
        Mapping,
        MutableMapping,
        Optional,
        Sequence,
        Tuple,
    )

    from typing_extensions import (
        NotRequired,
        TypedDict,
    )

    from .common import (
        RelPath,
    )

    from .crate import ROCrate

    class BasicLoggingConfigDict(TypedDict):
        filename: NotRequired[str]
        format: str
        level: int


import yaml

from . import get_rocrate_io_version_str
from .readers import (
    ROCrateReader,
    detect_reader_strategy,
)
from .utils.misc import (
    ConfigValidationException,
    config_validate,
)
from .validation import get_validator
from .writers import write_crate


class ROCrateIO_Commands(StrDocEnum):
    Validate = ("validate", "Read a crate, and report whether it is valid")
    ListEntities = (
        "list-entities",
        "List the data and contextual entities from a crate",
    )
    ListUntracked = (
        "list-untracked",
        "List the files from a crate which are not described by any data entity",
    )
    Convert = (
        "convert",
        "Read a crate, and write it again either as a directory or as a zip archive",
    )


DEFAULT_LOCAL_CONFIG_RELNAME = "rocrate_io_config.yml"
CONFIG_SCHEMA = cast("RelPath", "config.json")
LOGGING_FORMAT = "%(asctime)-15s - [%(levelname)s] %(message)s"
DEBUG_LOGGING_FORMAT = (
    "%(asctime)-15s - [%(name)s %(funcName)s %(lineno)d][%(levelname)s] %(message)s"
)

# This is going to be wildly reused
PathArgType = lambda p: pathlib.Path(p).absolute()


def genParserSub(
    sp: "argparse._SubParsersAction[argparse.ArgumentParser]",
    command: "ROCrateIO_Commands",
) -> "argparse.ArgumentParser":
    ap_ = sp.add_parser(
        command.value,
        formatter_class=ArgsDefaultWithRawHelpFormatter,
        help=command.description,
    )

    ap_.add_argument(
        "crate",
        type=PathArgType,
        help="The crate, either a directory or a zip archive",
    )

    if command == ROCrateIO_Commands.Convert:
        ap_.add_argument(
            "destination",
            type=PathArgType,
            help="Where the crate is going to be written",
        )
        ap_.add_argument(
            "--zip",
            dest="as_zip",
            action="store_true",
            default=False,
            help="Write the crate as a zip archive instead of a directory",
        )

    return ap_


def get_rocrate_io_argparse() -> "Tuple[argparse.ArgumentParser, str]":
    verstr = get_rocrate_io_version_str()

    defaultLocalConfigFilename = os.environ.get("ROCRATE_IO_CONFIG_FILE")
    if defaultLocalConfigFilename is None:
        defaultLocalConfigFilename = os.path.join(
            os.getcwd(), DEFAULT_LOCAL_CONFIG_RELNAME
        )
    elif not os.path.isabs(defaultLocalConfigFilename):
        defaultLocalConfigFilename = os.path.join(
            os.getcwd(), defaultLocalConfigFilename
        )

    ap = argparse.ArgumentParser(
        description="RO-Crate reader and writer " + verstr,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument(
        "--log-file",
        dest="logFilename",
        help="Store messages in a file instead of using standard error and standard output",
    )
    ap.add_argument(
        "-q",
        "--quiet",
        dest="logLevel",
        action="store_const",
        const=logging.WARNING,
        help="Only show warnings and errors",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        dest="logLevel",
        action="store_const",
        const=logging.INFO,
        help="Show verbose (informational) messages",
    )
    ap.add_argument(
        "-d",
        "--debug",
        dest="logLevel",
        action="store_const",
        const=logging.DEBUG,
        help="Show debug messages",
    )
    ap.add_argument(
        "-L",
        "--local-config",
        dest="localConfigFilename",
        default=defaultLocalConfigFilename,
        help="Local configuration file (can also be set up through ROCRATE_IO_CONFIG_FILE environment variable)",
    )
    ap.add_argument("-V", "--version", action="version", version=verstr)

    sp = ap.add_subparsers(
        dest="command",
        title="commands",
        description="Command to run",
    )
    for command in ROCrateIO_Commands:
        genParserSub(sp, command)

    return ap, defaultLocalConfigFilename


def load_local_config(
    localConfigFilename: "Optional[pathlib.Path]",
) -> "Mapping[str, Any]":
    """
    It loads and validates the configuration file. A non existing
    file means default values.
    """
    local_config: "MutableMapping[str, Any]"
    if localConfigFilename is not None and localConfigFilename.exists():
        with localConfigFilename.open(mode="r", encoding="utf-8") as cf:
            local_config = yaml.safe_load(cf)
        if local_config is None:
            local_config = {}
    else:
        local_config = {}
        if localConfigFilename is not None:
            logging.debug(f"Configuration file {localConfigFilename} does not exist")

    errors = config_validate(local_config, CONFIG_SCHEMA)
    if len(errors) > 0:
        raise ConfigValidationException(
            f"Configuration file {localConfigFilename} is not valid: "
            + "; ".join(error.message for error in errors)
        )

    return local_config


def read_crate_from_args(
    crate_path: "pathlib.Path", local_config: "Mapping[str, Any]"
) -> "ROCrate":
    reader = ROCrateReader(
        detect_reader_strategy(crate_path),
        validator=get_validator(local_config.get("validators")),
    )
    return reader.read_crate(crate_path)


def processListEntitiesCommand(crate: "ROCrate") -> "int":
    print(f"{crate.root_data_entity.id}\troot\t{','.join(crate.root_data_entity.types)}")
    for data_entity in crate.data_entities.values():
        print(
            f"{data_entity.id}\tdata\t{','.join(data_entity.types)}\t{'' if data_entity.source is None else data_entity.source}"
        )
    for contextual_entity in crate.contextual_entities.values():
        print(
            f"{contextual_entity.id}\tcontextual\t{','.join(contextual_entity.types)}"
        )
    return 0


def processListUntrackedCommand(crate: "ROCrate") -> "int":
    for untracked in crate.untracked_files:
        print(untracked.name)
    return 0


def main(argv: "Optional[Sequence[str]]" = None) -> "int":
    ap, _ = get_rocrate_io_argparse()
    args = ap.parse_args(argv)

    if args.command is None:
        print(ap.format_help())
        return 0

    command = ROCrateIO_Commands(args.command)

    # Setting up the log
    logLevel = logging.INFO
    if args.logLevel:
        logLevel = args.logLevel

    if logLevel < logging.INFO:
        logFormat = DEBUG_LOGGING_FORMAT
    else:
        logFormat = LOGGING_FORMAT

    loggingConf: "BasicLoggingConfigDict" = {"format": logFormat, "level": logLevel}

    if args.logFilename is not None:
        loggingConf["filename"] = args.logFilename

    logging.basicConfig(**loggingConf)

    try:
        local_config = load_local_config(
            pathlib.Path(args.localConfigFilename)
            if args.localConfigFilename
            else None
        )
        crate = read_crate_from_args(args.crate, local_config)

        if command == ROCrateIO_Commands.Validate:
            logging.info(
                f"Crate {args.crate} is valid ({len(crate.data_entities)} data entities, {len(crate.contextual_entities)} contextual entities)"
            )
            retval = 0
        elif command == ROCrateIO_Commands.ListEntities:
            retval = processListEntitiesCommand(crate)
        elif command == ROCrateIO_Commands.ListUntracked:
            retval = processListUntrackedCommand(crate)
        elif command == ROCrateIO_Commands.Convert:
            writer_config = local_config.get("writer", {})
            write_crate(
                crate,
                args.destination,
                as_zip=args.as_zip,
                include_untracked=writer_config.get("includeUntracked", True),
                json_indent=writer_config.get("jsonIndent", 4),
            )
            logging.info(f"Crate {args.crate} written at {args.destination}")
            retval = 0
        else:
            raise NotImplementedError(f"Unimplemented command {command}")
    except AbstractROCrateIOException as e:
        logging.error(str(e))
        retval = 1

    return retval


if __name__ == "__main__":
    sys.exit(main())
