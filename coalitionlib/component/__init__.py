'''Pluggable components of the apportionment and compatibility machinery.

Each module holds a register of named functions of one kind (divisors,
ideological distances, compatibility aggregations). Objects that accept such
a component take either its registered name or any callable with the same
signature.
'''
