"""``mztab-validator clean``: rewrite ms_run locations for publication."""

from __future__ import annotations

from mztab_validator.cleaner import MzTabCleaner
from mztab_validator.config import load_settings
from mztab_validator.context import SubmissionContext
from mztab_validator.io.files import read_dataset_id


def register_arguments(parser):
    parser.add_argument("--params", required=True, help="Workflow params.xml file")
    parser.add_argument("--mztab", required=True, help="Directory of mzTab files to clean")
    parser.add_argument("--mztab-path", dest="mztab_path", help="Relative path of the mzTab directory within the task or dataset")
    parser.add_argument("--peak", help="Directory of peak list files")
    parser.add_argument("--peak-path", dest="peak_path", help="Relative path of the peak list directory within the task or dataset")
    parser.add_argument("--dataset", help="Dataset ID, or a file whose first line is the dataset ID")
    parser.add_argument("--output", required=True, help="Directory to write cleaned mzTab files to")
    parser.add_argument("--ftp-host", dest="ftp_host", help="Host for dataset FTP locations (default: MZTAB_VALIDATOR_FTP_HOST)")
    parser.add_argument(
        "--push-through",
        dest="push_through",
        action="store_true",
        help="Leave ms_run locations alone; only ensure the validity columns",
    )


def dispatch(args):
    settings = load_settings()
    context = SubmissionContext.build(
        args.params,
        args.mztab,
        mztab_relative_path=args.mztab_path,
        peak_list_directory=args.peak,
        peak_list_relative_path=args.peak_path,
        dataset_id=read_dataset_id(args.dataset),
    )
    cleaner = MzTabCleaner(
        context,
        push_through=args.push_through,
        ftp_host=args.ftp_host or settings.ftp_host,
    )
    return cleaner.clean_all(args.output)
