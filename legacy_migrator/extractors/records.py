import csv
import html
import sys


# Legacy content cells routinely exceed the csv module default of 128 KiB.
try:
    csv.field_size_limit(sys.maxsize)
except (OverflowError, ValueError):
    csv.field_size_limit(10_000_000)


def _clean_cell(value):
    """Remove espaços nas bordas e decodifica entidades HTML de uma célula simples."""
    if value is None:
        return ''
    return html.unescape(value.strip())


def extract_records_from_csv(file_path, content_column='Content', id_column='ID'):
    """Extrai e normaliza registros de conteúdo a partir de uma exportação CSV do CMS legado.

    Cada linha vira um dicionário com as chaves ``ID``, ``Title`` e ``ContentHTML``
    além de todas as colunas originais. O HTML do conteúdo é mantido como está;
    apenas o ID e o título são limpos.

    Args:
        file_path (str): O caminho para o arquivo CSV.
        content_column (str): Nome da coluna que contém o HTML do conteúdo.
        id_column (str): Nome da coluna que contém o ID legado.

    Returns:
        list: Uma lista de dicionários, um por linha do CSV.

    Raises:
        FileNotFoundError: Se o arquivo CSV especificado não for encontrado.
        ValueError: Se o cabeçalho não tiver a coluna de conteúdo ou se ocorrer
                    um erro durante o processamento de uma linha.
    """
    records = []
    with open(file_path, mode='r', encoding='utf-8-sig', newline='') as csvfile:
        reader = csv.DictReader(csvfile)
        if reader.fieldnames is None or content_column not in reader.fieldnames:
            raise ValueError(f"Column '{content_column}' not found in {file_path}")
        for row_num, row in enumerate(reader, start=2):  # Start at 2 because header is row 1
            try:
                record = dict(row)
                record['ID'] = _clean_cell(row.get(id_column)) or str(row_num - 1)
                record['Title'] = _clean_cell(row.get('Title'))
                record['ContentHTML'] = row.get(content_column) or ''
                records.append(record)
            except Exception as e:
                raise ValueError(f"Error processing row {row_num} in {file_path}: {e}") from e
    return records
