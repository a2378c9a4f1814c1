# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this file,
# You can obtain one at http://mozilla.org/MPL/2.0/.
#
# Copyright (c) 2014-2020, Lars Asplund lars.anders.asplund@gmail.com


import sys
import shutil
from os import environ
from pathlib import Path
from shutil import rmtree
from vunit.color_printer import COLOR_PRINTER, NO_COLOR_PRINTER

_printer = COLOR_PRINTER


class VivadoNotFound(Exception):
    """
    Raised when no Vivado install matches the request
    """


def set_color(enabled):
    """
    Selects colored or plain output for warnings and errors

    Args:
        enabled: When False, all output is printed without color codes
    """
    global _printer
    _printer = COLOR_PRINTER if enabled else NO_COLOR_PRINTER


def print_warning(message):
    _printer.write(f"WARNING: {message}\n", fg="rgi")


def print_error(message):
    _printer.write(f"ERROR: {message}\n", output_file=sys.stderr, fg="ri")


def tcl_path(path):
    """
    Formats a path for use in a tcl script
    Braces keep spaces intact and forward slashes keep windows paths working

    Args:
        path: Any path like object

    Returns:
        The braced path string
    """
    text = str(path).replace("\\", "/")
    if "{" in text or "}" in text:
        # Braces can't quote a brace, escape each special character instead
        for char in '$[]"{}; ':
            text = text.replace(char, "\\" + char)
        return text
    return "{" + text + "}"


def tcl_list(paths):
    """
    Formats a list of paths as a tcl list

    Args:
        paths: An iterable of path like objects

    Returns:
        A "[list ...]" tcl expression
    """
    items = " ".join(tcl_path(path) for path in paths)
    if not items:
        return "[list]"
    return f"[list {items}]"


def clean_previous_run(project_dir, src_dir):
    """
    Removes the output of a previous run so the project starts fresh
    Deletes the whole project directory and any block design files left in the sources

    Args:
        project_dir: The generated vivado project directory
        src_dir: The HDL source directory

    Returns:
        A list of the paths that were removed
    """
    removed = []
    project_dir = Path(project_dir)
    if project_dir.exists():
        rmtree(project_dir)
        removed.append(project_dir)
    src_dir = Path(src_dir)
    if src_dir.is_dir():
        for bd_file in sorted(src_dir.glob("*.bd")):
            # Stale .bd from older flows can be a file or an exported folder
            if bd_file.is_dir():
                rmtree(bd_file)
            else:
                bd_file.unlink()
            removed.append(bd_file)
    return removed


def find_vivado_install(version):
    """
    Finds the install directory of the requested vivado version
    Search order is PATH, FPGA_BUILDER_VIVADO_{VERSION}_INSTALL_DIR, default Xilinx Path
    {VERSION} for "2019.1" would be "2019_1"

    Args:
        version: String representing the vivado version, i.e. "2019.1"

    Returns:
        The install directory, the one holding bin/vivado

    Raises:
        VivadoNotFound: If no search paths find this vivado version
    """
    env_var = f"FPGA_BUILDER_VIVADO_{version.replace('.', '_')}_INSTALL_DIR"

    # Installs are laid out as <root>/<version>/bin/vivado
    on_path = shutil.which("vivado")
    if on_path is not None and Path(on_path).parent.parent.name == version:
        return Path(on_path).parent.parent

    if env_var in environ:
        install_dir = Path(environ[env_var])
        if not install_dir.is_dir():
            raise VivadoNotFound(
                f"{env_var} points at {install_dir}, which does not exist"
            )
        return install_dir

    if sys.platform == "win32":
        install_dir = Path("C:/Xilinx/Vivado") / version
    else:
        install_dir = Path("/tools/Xilinx/Vivado") / version
    if (install_dir / "bin").is_dir():
        return install_dir

    raise VivadoNotFound(
        f"Vivado {version} not found.  Put it on PATH or set {env_var}"
    )


def get_vivado_install_dir(vivado_path=None, version=None):
    """
    Picks the vivado install directory to hand to vunit's run_vivado

    Args:
        vivado_path: Explicit install directory, always wins when given
        version: Optional vivado version to search for

    Returns:
        The install directory, or None to use whatever vivado is on PATH
    """
    if vivado_path is not None:
        vivado_path = Path(vivado_path)
        if not (vivado_path / "bin").is_dir():
            raise VivadoNotFound(f"{vivado_path} does not look like a vivado install")
        return vivado_path
    if version is None:
        return None
    return find_vivado_install(version)
