"""vuestarter -- prompt-driven scaffolder for a Vue.js starter project."""

__version__ = "1.4.0"
