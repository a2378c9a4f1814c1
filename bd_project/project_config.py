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

from pathlib import Path
import yaml

CONFIG_FILE_NAME = "project.yaml"

DEFAULT_PROJECT_NAME = "project_1"
DEFAULT_PROJECT_DIR = "project_1"
# Placeholder, every real repo should set its own part in project.yaml
DEFAULT_PART = "xcvc1234-abcd5678-9EF-g-H"
DEFAULT_SRC_DIR = "src"
DEFAULT_XDC_DIR = "xdc"
DEFAULT_BD_SCRIPT = "scripts/create_bd.tcl"
DEFAULT_SCRATCH_DIR = "scratch/bd_project"
DEFAULT_SOURCE_PATTERNS = ["*.v*", "*.vhdl", "*.vhd"]
DEFAULT_CONSTRAINT_PATTERNS = ["*.xdc"]

SOURCES_FILESET = "sources_1"
CONSTRAINTS_FILESET = "constrs_1"


class ConfigError(Exception):
    """
    Raised when a project config file can't be read or holds bad values
    """


def main():
    """
    Main function for this module, only used for debug
    """
    config = read_project_config(Path.cwd())
    print(config)


def read_project_config(root_dir, config_file=None, overrides=None):
    """
    Read the project config for the repo at root_dir and return a parsed
    `ProjectConfig`.  The config file is optional, defaults are used for
    anything it doesn't set.

    Args:
        root_dir: The root of the FPGA repo
        config_file: Optional explicit config path, defaults to root_dir/project.yaml
        overrides: Optional dictionary of values that win over the file, usually from the command line

    Returns:
        A `ProjectConfig` object representing the repo's project settings

    Raises:
        ConfigError: If an explicitly requested file doesn't exist or the file isn't valid
    """
    root_dir = Path(root_dir)
    if config_file is None:
        config_file = root_dir / CONFIG_FILE_NAME
        if not config_file.exists():
            return ProjectConfig(_merge({}, overrides))
    config_file = Path(config_file)
    if not config_file.exists():
        raise ConfigError(f"Config file {config_file} not found")

    try:
        with open(config_file) as file:
            config_dict = yaml.load(file, Loader=yaml.FullLoader)
    except yaml.YAMLError as err:
        raise ConfigError(f"Could not parse {config_file}: {err}") from err

    # An empty file loads as None
    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError(f"{config_file} must contain a mapping at the top level")
    return ProjectConfig(_merge(config_dict, overrides))


def _merge(config_dict, overrides):
    if overrides:
        config_dict = dict(config_dict)
        config_dict.update(
            {key: value for key, value in overrides.items() if value is not None}
        )
    return config_dict


class ProjectConfig:
    """
    Settings for the generated Vivado project

    Args:
        config_dict: The dictionary representing the config file,
        usually direct output of yaml.load

    Returns:
        A new `ProjectConfig` object representing the provided dictionary
    """

    def __init__(self, config_dict):
        self.project_name = str(config_dict.get("name", DEFAULT_PROJECT_NAME))
        # The project directory follows the name unless told otherwise
        self.project_dir = str(config_dict.get("project_dir", self.project_name))
        self.part = str(config_dict.get("part", DEFAULT_PART))
        self.src_dir = str(config_dict.get("src_dir", DEFAULT_SRC_DIR))
        self.xdc_dir = str(config_dict.get("xdc_dir", DEFAULT_XDC_DIR))
        self.bd_script = str(config_dict.get("bd_script", DEFAULT_BD_SCRIPT))
        self.scratch_dir = str(config_dict.get("scratch_dir", DEFAULT_SCRATCH_DIR))
        self.source_patterns = _get_patterns(
            config_dict, "source_patterns", DEFAULT_SOURCE_PATTERNS
        )
        self.constraint_patterns = _get_patterns(
            config_dict, "constraint_patterns", DEFAULT_CONSTRAINT_PATTERNS
        )
        version = config_dict.get("vivado_version")
        self.vivado_version = str(version) if version is not None else None

    def uses_default_part(self):
        return self.part == DEFAULT_PART

    def get_filesets(self, root_dir):
        """
        Gets the filesets to populate for the repo at root_dir

        Args:
            root_dir: The root of the FPGA repo

        Returns:
            A list of `FileSet` objects, sources first
        """
        root_dir = Path(root_dir)
        return [
            FileSet(SOURCES_FILESET, root_dir / self.src_dir, self.source_patterns),
            FileSet(
                CONSTRAINTS_FILESET, root_dir / self.xdc_dir, self.constraint_patterns
            ),
        ]

    def __str__(self):
        """
        Stringifies the `ProjectConfig`

        Returns:
            A string representing the `ProjectConfig`
        """
        return str(self.__dict__)

    def __repr__(self):
        return str(self)


def _get_patterns(config_dict, key, default):
    patterns = config_dict.get(key, default)
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, list) or not all(
        isinstance(pattern, str) for pattern in patterns
    ):
        raise ConfigError(f"'{key}' must be a glob pattern or a list of them")
    return list(patterns)


class FileSet:
    """
    Represents a Vivado fileset and where its files come from

    Args:
        name: The Vivado fileset name, i.e. "sources_1"
        directory: The folder searched for files
        patterns: Glob patterns matched inside directory, not recursive

    Returns:
        A new `FileSet` object
    """

    def __init__(self, name, directory, patterns):
        self.name = name
        self.directory = Path(directory)
        self.patterns = list(patterns)

    def find_files(self):
        """
        Finds all files in this fileset's directory matching its patterns.
        A missing directory or no matches gives an empty list.

        Returns:
            A sorted list of absolute paths, each file listed once
        """
        if not self.directory.is_dir():
            return []
        found = set()
        for pattern in self.patterns:
            for path in self.directory.glob(pattern):
                if path.is_file():
                    found.add(path.resolve())
        return sorted(found)

    def __str__(self):
        """
        Stringifies the `FileSet`

        Returns:
            A string representing the `FileSet`
        """
        return str(self.__dict__)

    def __repr__(self):
        return str(self)


if __name__ == "__main__":
    main()
