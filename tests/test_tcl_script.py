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

from pathlib import PureWindowsPath

from bd_project.tcl_script import TclScript, tcl_escape, tcl_string, tcl_var


def test_tcl_string_escapes_substitution():
    assert tcl_string('say "hi" [now]') == '"say \\"hi\\" \\[now\\]"'
    # Text from python never substitutes
    assert tcl_string("/work/my$repo") == '"/work/my\\$repo"'
    # Only tcl_var pieces do
    assert tcl_string("name: ", tcl_var("bd_name")) == '"name: $bd_name"'


def test_tcl_escape_backslashes():
    assert tcl_escape("C:\\new\\src") == "C:\\\\new\\\\src"
    assert tcl_escape(PureWindowsPath("C:\\new\\src")) == "C:/new/src"


def test_guarded_command_aborts_with_name_and_message():
    script = TclScript()
    script.guarded("create_project", "create_project {p} {/r/p} -part {xc7}")
    assert script.lines == [
        "if {[catch {create_project {p} {/r/p} -part {xc7}} err_msg]} {",
        '    error "COMMAND FAILED: create_project\\nError: $err_msg"',
        "}",
    ]


def test_tolerated_command_only_warns():
    script = TclScript()
    script.tolerated("create_bd.tcl", "source {/r/scripts/create_bd.tcl}", "Check above.")
    text = script.render()
    assert "catch {source {/r/scripts/create_bd.tcl}} result" in text
    assert "error" not in text.replace("errors", "")
    assert 'puts "WARNING: $result"' in text


def test_require_files():
    script = TclScript()
    script.require_files("wrapper_file", "wrapper_dir", "*_wrapper.v*", "CRITICAL ERROR: no wrapper")
    assert script.lines == [
        "set wrapper_file [glob -nocomplain -directory $wrapper_dir {*_wrapper.v*}]",
        "if {[llength $wrapper_file] == 0} {",
        '    error "CRITICAL ERROR: no wrapper in $wrapper_dir"',
        "}",
    ]


def test_title_and_render():
    script = TclScript(title="Generated\nfile")
    script.puts("hello")
    script.exit()
    assert script.render() == '# Generated\n# file\n\nputs "hello"\nexit\n'
    assert str(script) == script.render()


def test_write_creates_parents(tmp_path):
    script = TclScript()
    script.exit()
    path = script.write(tmp_path / "scratch" / "bd_project" / "create_project.tcl")
    assert path.read_text() == "exit\n"
