"""Generation agents: providers, asset pipeline and session state machine."""
