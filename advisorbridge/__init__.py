"""advisorbridge - JSON-RPC bridge to the advisor REPL process."""

__version__ = "0.1.0"
__logo__ = "🧮"
