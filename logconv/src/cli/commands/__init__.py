"""
Pacote de comandos do CLI logconv.

Cada arquivo neste diretório implementa um subcomando:
- init_cmd.py → logconv init
- detect_cmd.py → logconv detect
- convert_cmd.py → logconv convert
"""
