# routes/__init__.py
# Blueprints: auth, admin (управление), judge (судья), main (прогресс и результаты)
