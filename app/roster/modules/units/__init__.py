"""
Units: derived from the unit summary each character embeds, optionally enriched by an emblem record.
"""
