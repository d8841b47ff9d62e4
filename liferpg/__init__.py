"""
LifeRPG - геймификация привычек: опыт, уровни и характеристики героя
по журналу выполненных задач.
"""

__version__ = "1.0.0"
