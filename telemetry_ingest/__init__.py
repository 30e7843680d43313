"""Servicio de ingesta de telemetría de buques.

Valida cada señal contra el registro de señales conocidas, la clasifica
como aceptada o en cuarentena y persiste el resultado junto con las
métricas de latencia de la request.
"""
