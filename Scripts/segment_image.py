import argparse
import logging

import cv2

from yoloseg_kit import PipelineConfig, PipelineFailure, load_class_names, load_pipeline, render_result, resolve_path


def build_config(args: argparse.Namespace) -> PipelineConfig:
    # Labels resolve against the project root, like the model paths.
    return PipelineConfig(
        input_shape=(1, 3, args.imgsz, args.imgsz),
        class_names=load_class_names(resolve_path(args.labels)),
        topk=args.topk,
        iou_threshold=args.iou,
        score_threshold=args.conf,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Run YOLOv8 instance segmentation on one image and visualize the result.")
    parser.add_argument("--image", required=True, help="Path to an input image.")
    parser.add_argument("--model", default="Models/yolov8n-seg.onnx", help="Path to the YOLOv8-seg ONNX model.")
    parser.add_argument("--nms-model", default=None, help="Optional NMS ONNX graph (NumPy NMS when omitted).")
    parser.add_argument("--mask-model", default=None, help="Optional mask ONNX graph (NumPy masks when omitted).")
    parser.add_argument("--labels", default="Models/labels.json", help="Class labels (labels.json or metadata.yaml).")
    parser.add_argument("--imgsz", type=int, default=640, help="Model input size (square).")
    parser.add_argument("--topk", type=int, default=100, help="Max boxes kept per class.")
    parser.add_argument("--conf", type=float, default=0.25, help="Score threshold.")
    parser.add_argument("--iou", type=float, default=0.45, help="IoU threshold for NMS.")
    parser.add_argument(
        "--onnx-providers",
        default=None,
        help='Comma-separated ORT providers, e.g. "CUDAExecutionProvider,CPUExecutionProvider".',
    )
    parser.add_argument("--source-coords", action="store_true", help="Print boxes in original image pixels.")
    parser.add_argument("--show", action="store_true", help="Show a window with the rendered result.")
    parser.add_argument("--out", default=None, help="Optional output path to save the rendered result.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.imgsz < 32:
        raise ValueError("--imgsz must be >= 32")
    onnx_providers = None
    if args.onnx_providers:
        onnx_providers = [p.strip() for p in str(args.onnx_providers).split(",") if p.strip()]

    pipeline = load_pipeline(
        args.model,
        build_config(args),
        selector_path=args.nms_model,
        mask_path=args.mask_model,
        providers=onnx_providers,
        color_order="BGR",
    )

    img = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {args.image}")

    try:
        result = pipeline(img)
    except PipelineFailure as exc:
        print(f"Detection failed at stage '{exc.stage}' ({exc.kind})")
        return 1

    boxes = result.source_boxes() if args.source_coords else [d.box for d in result.detections]
    for det, box in zip(result.detections, boxes):
        print(det.label, f"{det.probability:.3f}", box.as_xywh())

    vis = render_result(img, result)
    if args.out:
        ok = cv2.imwrite(args.out, vis)
        if not ok:
            raise RuntimeError(f"Failed to write output image: {args.out}")

    if args.show:
        cv2.imshow("segmentation", vis)
        cv2.waitKey(0)
        cv2.destroyAllWindows()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
