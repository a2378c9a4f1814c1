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
Builder for the batch tcl script handed to vivado

Every vivado command goes through `TclScript.guarded` so a failure aborts the
batch session with the command name and vivado's own error text, or through
`TclScript.tolerated` for the few commands allowed to fail.

Text from python (paths, names) is always escaped.  Only `tcl_var` and
`TclRaw` pieces reach tcl untouched.
"""

from pathlib import Path, PurePath


class TclRaw(str):
    """
    Text inserted into a tcl string as is, i.e. a variable or an escape
    """


NEWLINE = TclRaw("\\n")


def tcl_var(name):
    return TclRaw(f"${name}")


def tcl_escape(value):
    """
    Escapes a value for use inside a tcl double quoted string
    Paths are written with forward slashes

    Args:
        value: A string, path or `TclRaw`

    Returns:
        The escaped text, `TclRaw` is returned unchanged
    """
    if isinstance(value, TclRaw):
        return str(value)
    if isinstance(value, PurePath):
        value = value.as_posix()
    text = str(value)
    # Backslash first so the added ones aren't doubled
    for char in '\\$[]"':
        text = text.replace(char, "\\" + char)
    return text


def tcl_string(*parts):
    """
    Joins parts into one tcl double quoted string

    Args:
        parts: Strings and paths, escaped, or `TclRaw` pieces such as `tcl_var("bd_name")`

    Returns:
        The quoted string
    """
    return '"' + "".join(tcl_escape(part) for part in parts) + '"'


class TclScript:
    """
    Accumulates tcl lines for a single vivado batch session
    """

    def __init__(self, title=None):
        self.lines = []
        if title is not None:
            self.comment(title)
            self.blank()

    def blank(self):
        self.lines.append("")

    def comment(self, text):
        for line in text.splitlines() or [""]:
            self.lines.append(f"# {line}".rstrip())

    def raw(self, line):
        self.lines.append(line)

    def puts(self, *parts):
        self.lines.append(f"puts {tcl_string(*parts)}")

    def set(self, name, value):
        """
        Sets a tcl variable

        Args:
            name: The variable name
            value: A tcl expression, inserted as is
        """
        self.lines.append(f"set {name} {value}")

    def guarded(self, name, command):
        """
        Runs a command, any error aborts the session naming the command

        Args:
            name: Label used in the failure message, i.e. "add_files (sources)"
            command: The tcl command to run
        """
        failure = tcl_string(
            f"COMMAND FAILED: {name}", NEWLINE, "Error: ", tcl_var("err_msg")
        )
        self.lines.extend(
            [
                f"if {{[catch {{{command}}} err_msg]}} {{",
                f"    error {failure}",
                "}",
            ]
        )

    def tolerated(self, name, command, note):
        """
        Runs a command whose failure is reported but doesn't stop the session

        Args:
            name: Label used in the warning
            command: The tcl command to run
            note: Extra explanation printed along with the error text
        """
        warning = tcl_string(f"WARNING: {name} reported errors, continuing. {note}")
        self.lines.extend(
            [
                f"if {{[catch {{{command}}} result]}} {{",
                f"    puts {warning}",
                f"    puts {tcl_string('WARNING: ', tcl_var('result'))}",
                "}",
            ]
        )

    def require_files(self, variable, dir_variable, pattern, message):
        """
        Globs for files and aborts the session if none are found

        Args:
            variable: Name of the tcl variable that receives the file list
            dir_variable: Name of the tcl variable holding the directory to search
            pattern: Glob pattern inside the directory
            message: Error text, the directory is appended
        """
        # -directory keeps glob characters in the directory itself literal
        self.set(
            variable, f"[glob -nocomplain -directory ${dir_variable} {{{pattern}}}]"
        )
        failure = tcl_string(message, " in ", tcl_var(dir_variable))
        self.lines.extend(
            [
                f"if {{[llength ${variable}] == 0}} {{",
                f"    error {failure}",
                "}",
            ]
        )

    def exit(self):
        self.lines.append("exit")

    def render(self):
        return "\n".join(self.lines) + "\n"

    def write(self, path):
        """
        Writes the script, creating parent directories as needed

        Args:
            path: Where to write the script

        Returns:
            The resolved path that was written
        """
        path = Path(path).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as file:
            file.write(self.render())
        return path

    def __str__(self):
        return self.render()
