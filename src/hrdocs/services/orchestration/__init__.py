"""
Orchestration service package coordinating document analysis and persistence.
"""

from .orchestrator import DocumentAnalysisOrchestrator

__all__ = ['DocumentAnalysisOrchestrator']
