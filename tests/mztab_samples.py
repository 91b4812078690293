"""Builders for small params.xml and mzTab documents used across tests."""

PSM_COLUMNS = ["sequence", "PSM_ID", "accession", "modifications", "spectra_ref"]


def params_xml(uploads=(), results=(), user="jdoe", task="abc123"):
    lines = ["<?xml version=\"1.0\" encoding=\"UTF-8\"?>", "<parameters>"]
    if user is not None:
        lines.append(f'  <parameter name="user">{user}</parameter>')
    if task is not None:
        lines.append(f'  <parameter name="task">{task}</parameter>')
    for value in uploads:
        lines.append(f'  <parameter name="upload_file_mapping">{value}</parameter>')
    for value in results:
        lines.append(f'  <parameter name="result_file_mapping">{value}</parameter>')
    lines.append("</parameters>")
    return "\n".join(lines) + "\n"


def mztab_text(ms_runs, rows, columns=None, extra_sections=()):
    """Minimal mzTab: metadata, optional extra lines, then a PSM section."""

    columns = PSM_COLUMNS if columns is None else columns
    lines = ["MTD\tmzTab-version\t1.0.0", "MTD\tmzTab-mode\tSummary"]
    for index, location in ms_runs.items():
        lines.append(f"MTD\tms_run[{index}]-location\t{location}")
    lines.append("")
    lines.extend(extra_sections)
    lines.append("\t".join(["PSH", *columns]))
    for row in rows:
        lines.append("\t".join(["PSM", *row]))
    return "\n".join(lines) + "\n"


def psm_row(psm_id, spectra_ref, sequence="PEPTIDEK", accession="P12345", modifications="null"):
    return [sequence, str(psm_id), accession, modifications, spectra_ref]


SUBMISSION_UPLOADS = [
    "PEAK-00000.mzML|jdoe/study/spectra/run1.mzML",
    "RESULT-00000.mzid|jdoe/study/results/search.mzid",
]
SUBMISSION_RESULTS = ["search.mzid#run1.mzML|spectra/run1.mzML"]
