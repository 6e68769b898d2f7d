"""
CLI module - command-line interface.

Provides entry points for:
- Asking a question end to end
- Classifying urgency
- Inspecting the knowledge base
"""

from medical_rag_pipeline.cli.commands import (
    main,
    run_ask_cli,
    run_classify_cli,
    run_stats_cli,
)

__all__ = [
    "main",
    "run_ask_cli",
    "run_classify_cli",
    "run_stats_cli",
]
