"""Multi-call tools shipped with multicall."""
