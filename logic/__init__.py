# logic/__init__.py
# Ядро: статусы слотов, матрицы прогресса, рейтинги и права доступа.
# Функции работают с уже загруженными объектами и ничего не хранят между запросами.
