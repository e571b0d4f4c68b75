def solve(factors, upper_bound):
    return sum(m for m in range(1, upper_bound) if any(m % f == 0 for f in factors))
