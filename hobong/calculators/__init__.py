"""Pure calculation modules: tenure, career, rank and internal career."""
