"""``mztab-validator validate``: check PSM rows against submitted spectra."""

from __future__ import annotations

from mztab_validator.config import load_settings
from mztab_validator.context import SubmissionContext
from mztab_validator.errors import ValidationThresholdError
from mztab_validator.io.files import read_dataset_id
from mztab_validator.logging import get_logger
from mztab_validator.mztab.modification import ModificationRecord
from mztab_validator.nativeid import MzIdentMLNativeIDMap
from mztab_validator.report import (
    FileSummary,
    StatisticsWriter,
    ValidationSummary,
    render_summary,
    write_summary_json,
)
from mztab_validator.spectra import load_scans_directory
from mztab_validator.validation import PSMValidator, check_threshold


logger = get_logger(__file__)


def register_arguments(parser):
    parser.add_argument("--params", required=True, help="Workflow params.xml file")
    parser.add_argument("--mztab", help="Directory of mzTab files to validate (searched recursively)")
    parser.add_argument("--mztab-path", dest="mztab_path", help="Relative path of the mzTab directory within the task or dataset")
    parser.add_argument("--peak", help="Directory of peak list files")
    parser.add_argument("--peak-path", dest="peak_path", help="Relative path of the peak list directory within the task or dataset")
    parser.add_argument("--scans", help="Directory of <peak list>.scans spectrum summary files")
    parser.add_argument("--result", help="Directory of uploaded result files (mzIdentML lookups)")
    parser.add_argument("--dataset", help="Dataset ID, or a file whose first line is the dataset ID")
    parser.add_argument("--output", required=True, help="Statistics TSV to write")
    parser.add_argument("--json", help="Also write a JSON validation summary here")
    parser.add_argument(
        "--threshold",
        type=float,
        help="Maximum allowed percentage of invalid PSM rows per file "
        "(default: MZTAB_VALIDATOR_FAILURE_THRESHOLD or 10)",
    )
    parser.add_argument(
        "--count-only",
        dest="count_only",
        action="store_true",
        help="Only count rows; do not check spectra or rewrite files",
    )
    parser.add_argument(
        "--fixed-mod",
        dest="fixed_mods",
        action="append",
        default=[],
        metavar="PARAM",
        help='Fixed modification, e.g. "[UNIMOD, UNIMOD:4, Carbamidomethyl, C+57.021]"',
    )
    parser.add_argument(
        "--variable-mod",
        dest="variable_mods",
        action="append",
        default=[],
        metavar="PARAM",
        help="Variable modification, same format as --fixed-mod",
    )


def dispatch(args):
    settings = load_settings()
    threshold = args.threshold if args.threshold is not None else settings.failure_threshold

    context = SubmissionContext.build(
        args.params,
        args.mztab,
        mztab_relative_path=args.mztab_path,
        peak_list_directory=args.peak,
        peak_list_relative_path=args.peak_path,
        dataset_id=read_dataset_id(args.dataset),
    )
    modifications = [ModificationRecord(value, fixed=True) for value in args.fixed_mods]
    modifications += [ModificationRecord(value, fixed=False) for value in args.variable_mods]
    validator = PSMValidator(
        load_scans_directory(args.scans),
        MzIdentMLNativeIDMap(args.result),
        count_only=args.count_only,
        modifications=modifications,
    )

    writer = StatisticsWriter(args.output)
    summary = ValidationSummary(threshold=threshold, count_only=args.count_only)
    reports = []
    try:
        for mztab in context.mztab_files:
            report = validator.validate_file(mztab)
            reports.append(report)
            writer.write(report)
            summary.files.append(FileSummary.from_report(report))
            if not args.count_only:
                check_threshold(report, threshold)
    except ValidationThresholdError as exc:
        summary.passed = False
        summary.failure = str(exc)
        raise
    finally:
        render_summary(reports, threshold=threshold)
        if args.json:
            write_summary_json(summary, args.json)

    logger.info(
        "Validated %d mzTab file(s): %d of %d PSM rows invalid",
        len(reports),
        summary.invalid_psm_rows,
        summary.psm_rows,
    )
    return summary
