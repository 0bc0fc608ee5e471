"""
Embedded starter templates, one set per project kind.

File paths and contents may use ``{{project_name}}``, ``{{crate_name}}``
(underscored) and ``{{contract_name}}`` (PascalCase) placeholders.
"""
import re
from typing import Dict

from ..contracts.artifact import ProjectKind

RUST_CARGO_TOML = """[package]
name = "{{project_name}}"
version = "0.1.0"
edition = "2021"

[dependencies]
fluentbase-sdk = { git = "https://github.com/fluentlabs-xyz/fluentbase", branch = "devel", default-features = false }

[dev-dependencies]
hex-literal = "0.4.1"
hex = "0.4.3"

[lib]
crate-type = ["cdylib", "staticlib"]
path = "lib.rs"

[features]
default = ["std"]
std = [
    "fluentbase-sdk/std"
]
"""

RUST_LIB_RS = """#![cfg_attr(target_arch = "wasm32", no_std)]
extern crate fluentbase_sdk;
use fluentbase_sdk::{basic_entrypoint, derive::Contract, SharedAPI};

#[derive(Contract)]
struct GREETING<SDK> {
    sdk: SDK,
}

impl<SDK: SharedAPI> GREETING<SDK> {
    fn deploy(&mut self) {
        // any custom deployment logic here
    }

    fn main(&mut self) {
        // write "Hello, World" message into output
        self.sdk.write("Hello, World".as_bytes());
    }
}

basic_entrypoint!(GREETING);
"""

TS_PACKAGE_JSON = """{
  "name": "{{project_name}}",
  "version": "0.1.0",
  "private": true,
  "scripts": {
    "build": "asc assembly/index.ts --outFile build/{{project_name}}.wasm --optimize"
  },
  "devDependencies": {
    "assemblyscript": "^0.27.0"
  }
}
"""

TS_INDEX = """// Entry point compiled to build/{{project_name}}.wasm
export function main(): string {
  return "Hello, World";
}
"""

SOLIDITY_CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.24;

contract {{contract_name}} {
    string private greeting = "Hello, World";

    function greet() external view returns (string memory) {
        return greeting;
    }
}
"""

GO_MOD = """module {{project_name}}

go 1.22
"""

GO_MAIN = """package main

//export main
func main() {
	_ = "Hello, World"
}
"""

GITIGNORE = """target/
build/
node_modules/
.env
deployments/
logs/
"""

TEMPLATES: Dict[ProjectKind, Dict[str, Dict[str, str]]] = {
    ProjectKind.RUST: {
        "greeting": {"Cargo.toml": RUST_CARGO_TOML, "lib.rs": RUST_LIB_RS, ".gitignore": GITIGNORE},
    },
    ProjectKind.TYPESCRIPT: {
        "greeting": {"package.json": TS_PACKAGE_JSON, "assembly/index.ts": TS_INDEX, ".gitignore": GITIGNORE},
    },
    ProjectKind.SOLIDITY: {
        "greeting": {"contracts/{{contract_name}}.sol": SOLIDITY_CONTRACT, ".gitignore": GITIGNORE},
    },
    ProjectKind.GO: {
        "greeting": {"go.mod": GO_MOD, "main.go": GO_MAIN, ".gitignore": GITIGNORE},
    },
}

DEFAULT_TEMPLATE = "greeting"


def placeholders(project_name: str) -> Dict[str, str]:
    words = [w for w in re.split(r"[^A-Za-z0-9]+", project_name) if w]
    return {
        "project_name": project_name,
        "crate_name": project_name.replace("-", "_"),
        "contract_name": "".join(w[:1].upper() + w[1:] for w in words) or "Contract",
    }


def render(text: str, values: Dict[str, str]) -> str:
    for key, value in values.items():
        text = text.replace("{{" + key + "}}", value)
    return text
