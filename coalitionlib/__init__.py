'''Election seat apportionment and governing coalition analysis.

Apportions parliamentary seats from vote totals by highest averages, then
finds the coalitions the seated parties could form and scores them for
ideological compatibility and stability, honoring the red lines the parties
have drawn against each other.

The main entry points are :class:`coalitionlib.apportion.ApportionmentEngine`,
:class:`coalitionlib.compatibility.CompatibilityModel` and
:class:`coalitionlib.coalition.CoalitionSearch`; the
:class:`coalitionlib.config.AnalysisConfig` builds all three from one set of
settings.
'''
