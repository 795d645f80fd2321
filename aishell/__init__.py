"""aishell - AI-powered shell automation.

An LLM agent that drives local tools (bash, read, write, list) through a
bounded tool-calling loop, plus a line-delimited JSON server exposing the
same tools to an external controller.
"""

__version__ = "0.1.0"
