# Copyright (c) 2022, Intrepid Control Systems, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice, this
#    list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

"""
Creates a vivado project for an FPGA repo laid out as

    src/                    HDL sources
    xdc/                    Constraints
    scripts/create_bd.tcl   Builds the block design

The repo gets a fresh project, all sources and constraints, the block design,
an HDL wrapper for the block design and a settled compile order.  Path
handling and cleanup happen here, everything else is a generated tcl script
run by vivado in batch mode.
"""

import argparse
import sys
from os import environ
from pathlib import Path
from subprocess import CalledProcessError
from vunit.vivado import run_vivado, create_compile_order_file

from .project_config import (
    read_project_config,
    ConfigError,
    SOURCES_FILESET,
    CONSTRAINTS_FILESET,
)
from .tcl_script import TclScript, tcl_var
from .vivado_util import (
    clean_previous_run,
    get_vivado_install_dir,
    print_error,
    print_warning,
    set_color,
    tcl_list,
    tcl_path,
    VivadoNotFound,
)

SCRIPT_NAME = "create_project.tcl"
WRAPPER_PATTERN = "*_wrapper.v*"


class ProjectCreationError(Exception):
    """
    Raised when vivado fails to produce the project
    """


class ProjectContext:
    """
    Everything the steps need to know about the project being created.
    Stands in for vivado's current project and current block design, which
    only exist inside the batch session.

    Args:
        root_dir: The root of the FPGA repo
        config: The `ProjectConfig` to build from
    """

    def __init__(self, root_dir, config):
        self.root_dir = Path(root_dir).resolve()
        self.config = config
        self.project_name = config.project_name
        self.part = config.part
        self.src_dir = (self.root_dir / config.src_dir).resolve()
        self.xdc_dir = (self.root_dir / config.xdc_dir).resolve()
        self.bd_script = (self.root_dir / config.bd_script).resolve()
        self.project_dir = (self.root_dir / config.project_dir).resolve()
        self.project_file = self.project_dir / f"{self.project_name}.xpr"
        # Vivado names the generated output folder after the project, not the directory
        self.bd_output_dir = (
            self.project_dir / f"{self.project_name}.gen" / SOURCES_FILESET / "bd"
        )
        self.script_file = (self.root_dir / config.scratch_dir / SCRIPT_NAME).resolve()
        self.filesets = config.get_filesets(self.root_dir)
        self.check_project_dir()

    def check_project_dir(self):
        """
        Makes sure deleting the project directory can't take anything else with it

        Raises:
            ConfigError: If the project directory isn't a folder of its own inside the repo
        """
        if self.root_dir not in self.project_dir.parents:
            raise ConfigError(
                f"Project directory {self.project_dir} must be a folder inside the repo root {self.root_dir}"
            )
        for kept in (self.src_dir, self.xdc_dir, self.bd_script, self.script_file):
            if kept == self.project_dir or self.project_dir in kept.parents:
                raise ConfigError(
                    f"Project directory {self.project_dir} is deleted on every run and can't hold {kept}"
                )

    def __str__(self):
        return str(self.__dict__)

    def __repr__(self):
        return str(self)


def create_project_step(script, ctx):
    script.puts(
        "--- Step 1: Creating project (", ctx.project_name, ") with part ", ctx.part, " ---"
    )
    script.guarded("cd", f"cd {tcl_path(ctx.root_dir)}")
    # The script may be run on its own, so it clears the previous run as well
    script.guarded(
        "file delete (project)", f"file delete -force {tcl_path(ctx.project_dir)}"
    )
    script.guarded(
        "file delete (*.bd)",
        f"foreach bd_file [glob -nocomplain -directory {tcl_path(ctx.src_dir)} *.bd] "
        "{file delete -force $bd_file}",
    )
    script.guarded(
        "create_project",
        f"create_project {tcl_path(ctx.project_name)} {tcl_path(ctx.project_dir)} "
        f"-part {tcl_path(ctx.part)}",
    )


def source_mode_step(script, ctx):
    # Module reference cells in the block design need automatic compile order
    script.puts(
        "INFO: Switched project to AUTOMATIC Compile Order Mode for module reference compatibility."
    )
    script.guarded(
        "set_property source_mgmt_mode All",
        "set_property source_mgmt_mode All [current_project]",
    )


def add_sources_step(script, ctx):
    """
    Adds every file found for each fileset.  Files are found now rather than
    in vivado so an empty folder just means nothing gets added.
    """
    script.puts("--- Step 2: Adding sources from ", ctx.src_dir, " ---")
    labels = {SOURCES_FILESET: "sources", CONSTRAINTS_FILESET: "constraints"}
    for fileset in ctx.filesets:
        label = labels.get(fileset.name, fileset.name)
        files = fileset.find_files()
        if not files:
            print(f"INFO: No {label} found in {fileset.directory}, skipping")
            script.puts(f"INFO: No {label} found in ", fileset.directory)
            continue
        print(f"INFO: Adding {len(files)} {label} from {fileset.directory}")
        script.puts(f"INFO: Adding {label} from ", fileset.directory)
        script.guarded(
            f"add_files ({label})",
            f"add_files -fileset {fileset.name} {tcl_list(files)}",
        )


def block_design_step(script, ctx):
    script.puts(
        "--- Step 3: Sourcing create_bd.tcl to create Block Design structure ---"
    )
    # create_bd.tcl commonly trips over benign errors and still leaves a usable
    # block design behind, so only warn and let the wrapper step decide
    script.tolerated(
        "create_bd.tcl",
        f"source {tcl_path(ctx.bd_script)}",
        "Check the errors above if the wrapper step fails.",
    )


def wrapper_step(script, ctx):
    script.guarded(
        "current_bd_design", "set bd_name [get_property NAME [current_bd_design]]"
    )
    script.puts("INFO: Determined BD name: ", tcl_var("bd_name"))
    script.puts("INFO: Generating HDL wrapper for ", tcl_var("bd_name"))
    script.guarded("make_wrapper", "make_wrapper -files [get_files *.bd] -top -force")
    script.set(
        "wrapper_dir",
        f"[file normalize [file join {tcl_path(ctx.bd_output_dir)} $bd_name hdl]]",
    )
    script.require_files(
        "wrapper_file",
        "wrapper_dir",
        WRAPPER_PATTERN,
        "CRITICAL ERROR: Failed to find generated wrapper file",
    )
    script.puts(
        "INFO: Adding generated wrapper file: ",
        tcl_var("wrapper_file"),
        " to project sources.",
    )
    script.guarded(
        "add_files (wrapper)",
        f"add_files -fileset {SOURCES_FILESET} -norecurse $wrapper_file",
    )


def compile_order_step(script, ctx):
    # Vivado often needs a second pass once generated sources are in, always run two
    update = f"update_compile_order -fileset {SOURCES_FILESET}"
    script.guarded("update_compile_order", update)
    script.guarded("update_compile_order", update)


def finalize_step(script, ctx):
    script.puts("--- Step 4: Finalizing project structure ---")
    script.puts(
        "--- Project creation complete. Project file: ",
        f"{ctx.project_name}.xpr",
        " is ready. ---",
    )
    script.exit()


# Run in this order, one script section each
TCL_STEPS = (
    create_project_step,
    source_mode_step,
    add_sources_step,
    block_design_step,
    wrapper_step,
    compile_order_step,
    finalize_step,
)


def generate_project_script(ctx):
    """
    Generates the tcl script that builds the project inside vivado

    Args:
        ctx: The `ProjectContext` for the project

    Returns:
        A `TclScript` ready to be written
    """
    script = TclScript(
        title=f"Generated by bd_project for {ctx.root_dir}, changes will be overwritten"
    )
    for index, step in enumerate(TCL_STEPS):
        if index:
            script.blank()
        step(script, ctx)
    return script


def create_project(
    root_dir, config=None, vivado_path=None, tcl_only=False, compile_order_file=None
):
    """
    Creates the vivado project for the repo at root_dir, deleting any previous one

    Args:
        root_dir: The root of the FPGA repo
        config: Optional `ProjectConfig`, read from root_dir when not provided
        vivado_path: Optional vivado install directory
        tcl_only: When True, writes the tcl script but doesn't run vivado
        compile_order_file: When set, the finished project's compile order is exported here

    Returns:
        The path to the .xpr file, or the tcl script when tcl_only

    Raises:
        ConfigError: If the project directory would take repo files with it
        ProjectCreationError: If vivado fails or doesn't produce the project file
    """
    if config is None:
        config = read_project_config(root_dir)
    ctx = ProjectContext(root_dir, config)
    print(f"Creating project {ctx.project_name} at {ctx.project_dir}")

    if config.uses_default_part():
        print_warning(f"Using placeholder part {ctx.part}, set 'part' in the project config")
    if not ctx.bd_script.exists():
        print_warning(
            f"Block design script {ctx.bd_script} not found, vivado won't have a block design to wrap"
        )

    script_file = generate_project_script(ctx).write(ctx.script_file)
    print(f"Wrote {script_file}")
    if tcl_only:
        # Nothing is deleted until the script runs
        print(f"Run it with: vivado -mode batch -source {script_file}")
        return script_file

    for removed in clean_previous_run(ctx.project_dir, ctx.src_dir):
        print(f"Removed {removed}")

    vivado_install_dir = get_vivado_install_dir(vivado_path, config.vivado_version)
    try:
        run_vivado(script_file, cwd=str(ctx.root_dir), vivado_path=vivado_install_dir)
    except CalledProcessError as err:
        raise ProjectCreationError(
            f"Vivado exited with code {err.returncode} creating {ctx.project_name}, see the log above"
        ) from err

    if not ctx.project_file.exists():
        raise ProjectCreationError(
            f"Vivado finished but {ctx.project_file} was not created"
        )
    print(f"Project ready: {ctx.project_file}")

    if compile_order_file is not None:
        export_compile_order(ctx.project_file, compile_order_file, vivado_install_dir)
    return ctx.project_file


def export_compile_order(project_file, compile_order_file, vivado_path=None):
    """
    Writes the project's compile order to a file, one "library,file" line per source

    Args:
        project_file: The .xpr to read
        compile_order_file: Where to write the compile order
        vivado_path: Optional vivado install directory
    """
    compile_order_file = Path(compile_order_file).resolve()
    compile_order_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        create_compile_order_file(
            str(project_file), str(compile_order_file), vivado_path=vivado_path
        )
    except CalledProcessError as err:
        raise ProjectCreationError(
            f"Vivado exited with code {err.returncode} exporting the compile order of {project_file}"
        ) from err
    print(f"Compile order written to {compile_order_file}")


def resolve_root(root=None):
    """
    Finds the repo root, an explicit root wins, then $BASE_DIR, then the current directory

    Returns:
        The resolved root directory

    Raises:
        ConfigError: If the directory doesn't exist
    """
    if root is None:
        root = environ.get("BASE_DIR", ".")
    root = Path(root).resolve()
    if not root.is_dir():
        raise ConfigError(f"Repo root {root} is not a directory")
    return root


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Create a vivado project with a block design wrapper for an FPGA repo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Root of the FPGA repo, defaults to $BASE_DIR or the current directory",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Project config file, defaults to <root>/project.yaml if it exists",
    )
    parser.add_argument("--part", default=None, help="Target FPGA part")
    parser.add_argument("--project-name", default=None, help="Vivado project name")
    parser.add_argument(
        "--vivado-version",
        default=None,
        help="Vivado version to search for, i.e. 2023.2",
    )
    parser.add_argument(
        "--vivado-path",
        default=None,
        help="Vivado install directory, overrides --vivado-version",
    )
    parser.add_argument(
        "--tcl-only",
        action="store_true",
        default=False,
        help="Only write the tcl script, don't run vivado",
    )
    parser.add_argument(
        "--compile-order-file",
        default=None,
        help="Export the finished project's compile order to this file",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Don't color warnings and errors",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """
    Command line entry point

    Returns:
        The exit code, 0 on success
    """
    args = parse_args(argv)
    set_color(not args.no_color)
    overrides = {
        "part": args.part,
        "name": args.project_name,
        "vivado_version": args.vivado_version,
    }
    try:
        root_dir = resolve_root(args.root)
        config = read_project_config(root_dir, args.config, overrides=overrides)
        create_project(
            root_dir,
            config,
            vivado_path=args.vivado_path,
            tcl_only=args.tcl_only,
            compile_order_file=args.compile_order_file,
        )
    except (ConfigError, VivadoNotFound, ProjectCreationError) as err:
        print_error(str(err))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
