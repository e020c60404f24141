"""Build and test Rust crates for the asm.js and WebAssembly targets."""

__version__ = "0.1.0"
