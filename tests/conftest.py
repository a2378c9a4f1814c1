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

"""Shared fixtures, none of the tests need vivado installed."""

import re
from pathlib import Path
from subprocess import CalledProcessError

import pytest

from bd_project import vivado_util


CREATE_PROJECT_RE = re.compile(r"create_project \{([^}]*)\} \{([^}]*)\}")


@pytest.fixture(autouse=True)
def plain_output():
    """Keep color codes out of captured output."""
    vivado_util.set_color(False)
    yield
    vivado_util.set_color(True)


@pytest.fixture
def fpga_repo(tmp_path):
    """A repo with the expected src/, xdc/ and scripts/ layout."""
    root = tmp_path / "fpga_repo"
    src = root / "src"
    src.mkdir(parents=True)
    (src / "top.v").write_text("module top; endmodule\n")
    (src / "regs.sv").write_text("module regs; endmodule\n")
    (src / "fifo.vhd").write_text("entity fifo is end entity;\n")
    (src / "ctrl.vhdl").write_text("entity ctrl is end entity;\n")
    (src / "notes.txt").write_text("not a source\n")
    xdc = root / "xdc"
    xdc.mkdir()
    (xdc / "pins.xdc").write_text("# pins\n")
    scripts = root / "scripts"
    scripts.mkdir()
    (scripts / "create_bd.tcl").write_text("create_bd_design design_1\n")
    return root


class FakeVivado:
    """
    Stands in for vunit's run_vivado.  Records every call and, unless told to
    fail, creates the .xpr named in the script the way vivado would.
    """

    def __init__(self):
        self.calls = []
        self.scripts = []
        self.returncode = 0
        self.create_xpr = True

    def __call__(self, tcl_file_name, tcl_args=None, cwd=None, vivado_path=None):
        self.calls.append(
            {
                "tcl_file_name": Path(tcl_file_name),
                "tcl_args": tcl_args,
                "cwd": cwd,
                "vivado_path": vivado_path,
            }
        )
        script = Path(tcl_file_name).read_text()
        self.scripts.append(script)
        if self.returncode != 0:
            raise CalledProcessError(self.returncode, "vivado")
        if self.create_xpr:
            name, project_dir = CREATE_PROJECT_RE.search(script).groups()
            project_dir = Path(project_dir)
            project_dir.mkdir(parents=True, exist_ok=True)
            (project_dir / f"{name}.xpr").write_text("<Project/>\n")


@pytest.fixture
def fake_vivado(monkeypatch):
    fake = FakeVivado()
    monkeypatch.setattr("bd_project.create_project.run_vivado", fake)
    return fake
