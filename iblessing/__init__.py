"""Objective-C Mach-O analysis helpers: method chains, type encodings, ARM64
registers, dyld binds, a sparse memory model and IDA script generators."""

__version__ = "0.1.0"