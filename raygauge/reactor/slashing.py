"""
isoRAY Slashing — пропорциональное списание isoRAY при выводе RAY

Доля списания:
    ratio = 0                           если ray_balance == 0 или ray_decrease == 0
    ratio = 1                           если ray_decrease == ray_balance
    ratio = ray_decrease / ray_balance  иначе

Списание округляется ВВЕРХ (в пользу протокола) и ограничено балансом:
    iso_ray_decrease = min(ceil(ratio * iso_ray), iso_ray)

Пример: вывод 1% RAY при iso_ray = 1 списывает весь 1 isoRAY.
"""

from raygauge.core.math import Number


def iso_ray_slash_ratio(ray_balance: int, ray_decrease: int) -> Number:
    """
    Доля выводимого RAY от застейканного баланса.

    Examples:
        >>> iso_ray_slash_ratio(100, 50)
        Number('0.5')
        >>> iso_ray_slash_ratio(100, 100)
        Number('1')
    """
    if ray_balance == 0 or ray_decrease == 0:
        return Number.ZERO
    if ray_decrease == ray_balance:
        return Number.ONE
    return Number.from_ratio(ray_decrease, ray_balance)


def iso_ray_slash_amount(ray_balance: int, ray_decrease: int, iso_ray: int) -> int:
    """
    Количество isoRAY к списанию при выводе ray_decrease.

    Args:
        ray_balance: Застейкано RAY до вывода
        ray_decrease: Выводимый RAY
        iso_ray: Баланс isoRAY до вывода

    Returns:
        Целое количество isoRAY, 0 <= result <= iso_ray
    """
    ratio = iso_ray_slash_ratio(ray_balance, ray_decrease)
    balance = Number.from_natural(iso_ray)
    return (ratio * balance).ceil().min(balance).floor_to_int()
