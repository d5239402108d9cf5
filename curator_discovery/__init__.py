"""Discovery agent for creator opportunities: grants, festivals, labs and residencies."""
