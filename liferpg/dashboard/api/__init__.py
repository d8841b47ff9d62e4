from . import campaigns, challenges, focus, logs, oracle, profile, stats, tasks

routers = [stats.router, tasks.router, logs.router, campaigns.router, challenges.router, focus.router, oracle.router, profile.router]

__all__ = ['routers']
