"""
minusagent: a small agent runtime built from nodes that prepare, execute and postprocess
against a shared context.
"""
__version__ = "0.1.0"
